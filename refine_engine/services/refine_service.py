"""
Refine service: turns a raw website idea into a structured build prompt.
"""
import time
from typing import Any

from refine_engine.logging_config import logger
from refine_engine.services.errors import ValidationError, to_refine_error
from refine_engine.services.providers import TextGenerationProvider
from refine_engine.services.refine_prompts import build_messages

MIN_IDEA_LENGTH = 10


def validate_idea(prompt: Any, min_length: int = MIN_IDEA_LENGTH) -> str:
    """
    Check the raw idea before any provider call.

    Args:
        prompt: Value of the request's "prompt" field
        min_length: Trimmed length the idea must exceed

    Returns:
        The idea, unchanged

    Raises:
        ValidationError: missing, not text, or too short
    """
    message = f"Please provide a more detailed idea (more than {min_length} characters)"

    if not isinstance(prompt, str):
        raise ValidationError(message)

    if len(prompt.strip()) <= min_length:
        raise ValidationError(message)

    return prompt


class PromptRefiner:
    """Validates an idea, sends it to the provider, relays the result"""

    def __init__(self, provider: TextGenerationProvider, min_length: int = MIN_IDEA_LENGTH):
        self.provider = provider
        self.min_length = min_length

    async def refine(self, prompt: Any) -> str:
        """
        Refine a website idea.

        Raises:
            ValidationError: before any provider call
            ConfigurationError: credential missing or rejected
            TransientProviderError: any other provider failure
        """
        idea = validate_idea(prompt, self.min_length)
        messages = build_messages(idea)

        start_time = time.time()
        logger.info(
            "Calling provider",
            provider=self.provider.name,
            model=self.provider.model,
            idea_length=len(idea)
        )

        try:
            text = await self.provider.generate(messages)
        except Exception as e:
            error = to_refine_error(e)
            logger.error(
                "Provider call failed",
                provider=self.provider.name,
                classification=error.kind.value,
                error_type=type(e).__name__,
                exc_info=True
            )
            raise error

        logger.info(
            "Idea refined",
            provider=self.provider.name,
            result_length=len(text),
            execution_time=time.time() - start_time
        )
        return text
