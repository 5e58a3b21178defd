"""
Client-side refine session.

Headless state machine behind the idea form. It owns the input text, the
refined result and the UI state, and talks to POST /api/refine. Rendering
is left to whatever front end drives it: side effects that would be UI
(notifications, clipboard) go through injected callables.

States and transitions:

    INITIAL --submit--> LOADING --success--> SUCCESS --reset--> INITIAL
                           |
                           +--failure--> INITIAL (input kept, error notified)

Only one request can be in flight: submit() is dropped while LOADING.
"""
import asyncio
from enum import Enum
from typing import Awaitable, Callable, Optional, Union

import httpx

from refine_engine.config import settings
from refine_engine.logging_config import logger


class UIState(Enum):
    """Form states"""
    INITIAL = "initial"
    LOADING = "loading"
    SUCCESS = "success"


EXAMPLE_PROMPTS = [
    "Portfolio for a photographer",
    "SaaS landing page with pricing",
    "Restaurant website with menu",
    "Personal blog with newsletter",
    "E-commerce store for clothing",
]

REFINE_PATH = "/api/refine"
COPIED_RESET_SECONDS = 2.0

# notify(level, title, description)
Notifier = Callable[[str, str, str], None]
ClipboardWriter = Callable[[str], Union[None, Awaitable[None]]]


def _log_notification(level: str, title: str, description: str) -> None:
    logger.info("Notification", level=level, title=title, description=description)


class RefineSession:
    """One user's interaction with the refine form"""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        notify: Optional[Notifier] = None,
        clipboard: Optional[ClipboardWriter] = None,
        min_length: int = settings.MIN_IDEA_LENGTH,
        max_length: int = settings.MAX_IDEA_LENGTH,
        copied_reset_seconds: float = COPIED_RESET_SECONDS,
    ):
        self.http_client = http_client
        self.notify = notify or _log_notification
        self.clipboard = clipboard
        self.min_length = min_length
        self.max_length = max_length
        self.copied_reset_seconds = copied_reset_seconds

        self.input = ""
        self.result = ""
        self.state = UIState.INITIAL
        self.copied = False
        self._copied_timer: Optional[asyncio.TimerHandle] = None

    @property
    def char_count(self) -> int:
        return len(self.input)

    @property
    def is_over_limit(self) -> bool:
        return self.char_count > self.max_length

    @property
    def is_editable(self) -> bool:
        """Input is locked while a request is in flight"""
        return self.state is not UIState.LOADING

    @property
    def can_submit(self) -> bool:
        return (
            len(self.input.strip()) > self.min_length
            and not self.is_over_limit
            and self.state is not UIState.LOADING
        )

    def set_input(self, text: str) -> None:
        if not self.is_editable:
            return
        self.input = text

    def apply_example(self, example: str) -> None:
        """Fill the input from one of EXAMPLE_PROMPTS"""
        self.set_input(example)

    async def submit(self) -> bool:
        """
        Send the current input for refinement.

        Returns:
            True when a result was received, False when the guard blocked
            the submit or the request failed
        """
        if not self.can_submit:
            return False

        self.state = UIState.LOADING
        logger.info("Submitting idea", idea_length=self.char_count)

        try:
            self.result = await self._request_refinement(self.input)
        except RefineRequestFailed as e:
            self.state = UIState.INITIAL
            logger.warning("Refine request failed", error=str(e))
            self.notify("error", "Something went wrong", str(e))
            return False

        self.state = UIState.SUCCESS
        return True

    async def _request_refinement(self, idea: str) -> str:
        try:
            response = await self.http_client.post(REFINE_PATH, json={"prompt": idea})
        except httpx.HTTPError as e:
            raise RefineRequestFailed("Please try again in a moment") from e

        if not response.is_success:
            raise RefineRequestFailed(_error_message(response))

        try:
            data = response.json()
        except ValueError as e:
            raise RefineRequestFailed("Please try again in a moment") from e

        if not isinstance(data, str):
            raise RefineRequestFailed("Failed to refine your idea")
        return data

    async def handle_key(self, key: str, ctrl: bool = False, meta: bool = False) -> bool:
        """Ctrl+Enter / Cmd+Enter submits, same guard as the button"""
        if key == "Enter" and (ctrl or meta):
            return await self.submit()
        return False

    async def copy_result(self) -> bool:
        """Copy the result to the clipboard and flag it as copied for a moment"""
        try:
            if self.clipboard is None:
                raise RuntimeError("No clipboard available")
            written = self.clipboard(self.result)
            if asyncio.iscoroutine(written):
                await written
        except Exception as e:
            logger.warning("Copy to clipboard failed", error=str(e))
            self.notify("error", "Failed to copy", "Please try selecting and copying manually")
            return False

        self.copied = True
        self.notify("success", "Copied to clipboard", "Your refined prompt is ready to paste")

        if self._copied_timer is not None:
            self._copied_timer.cancel()
        loop = asyncio.get_running_loop()
        self._copied_timer = loop.call_later(self.copied_reset_seconds, self._clear_copied)
        return True

    def _clear_copied(self) -> None:
        self.copied = False
        self._copied_timer = None

    def reset(self) -> bool:
        """Start over; ignored while a request is in flight"""
        if self.state is UIState.LOADING:
            return False
        if self._copied_timer is not None:
            self._copied_timer.cancel()
            self._copied_timer = None
        self.input = ""
        self.result = ""
        self.copied = False
        self.state = UIState.INITIAL
        return True


class RefineRequestFailed(Exception):
    """Refine call did not produce a result; message is user-facing"""


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and isinstance(body.get("error"), str) and body["error"]:
        return body["error"]
    return "Failed to refine your idea"
