"""
Refine API router
"""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
import sentry_sdk
from slowapi import Limiter
from slowapi.util import get_remote_address

from refine_engine.config import settings
from refine_engine.logging_config import logger
from refine_engine.services.errors import ErrorKind, RefineError
from refine_engine.services.refine_service import PromptRefiner

router = APIRouter()
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)


def get_refiner(request: Request) -> PromptRefiner:
    """Shared PromptRefiner created in the application lifespan"""
    return request.app.state.refiner


async def _read_prompt(request: Request):
    """Return the "prompt" field of a JSON object body, or None"""
    try:
        payload = await request.json()
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    return payload.get("prompt")


@router.post("/refine")
@limiter.limit(settings.RATE_LIMIT)
async def refine_idea(request: Request, refiner: PromptRefiner = Depends(get_refiner)):
    """
    Refine a raw website idea into a structured build prompt.

    Request body: {"prompt": "<idea>"}

    Returns:
    - 200 with the generated text as a JSON string
    - 400 {"error": ...} when the idea is missing or too short
    - 500 {"error": ...} when the provider is misconfigured or fails
    """
    prompt = await _read_prompt(request)

    logger.info(
        "Refine request received",
        prompt_length=len(prompt) if isinstance(prompt, str) else None
    )

    try:
        text = await refiner.refine(prompt)
    except RefineError as e:
        if e.kind is ErrorKind.VALIDATION:
            logger.info("Refine request rejected", reason=e.public_message)
        elif settings.SENTRY_DSN:
            sentry_sdk.capture_exception(e.__cause__ or e)

        return JSONResponse(
            status_code=e.status_code,
            content={"error": e.public_message}
        )

    return JSONResponse(content=text)
