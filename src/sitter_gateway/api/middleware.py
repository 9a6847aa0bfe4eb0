"""Request deadline middleware."""

import asyncio
import logging

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from sitter_gateway.api.errors import error_response
from sitter_gateway.exceptions import GatewayTimeoutError

logger = logging.getLogger(__name__)


class RequestTimeoutMiddleware:
    """One deadline over authentication plus the route handler.

    When it expires the inner chain is cancelled, not abandoned: the
    handler sees ``CancelledError`` at its current await, undoes what it
    owns, and only then is 504 sent.
    """

    def __init__(self, app: ASGIApp, timeout_seconds: float | None = None) -> None:
        self.app = app
        self.timeout_seconds = timeout_seconds

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not self.timeout_seconds:
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await asyncio.wait_for(
                self.app(scope, receive, send_wrapper),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.error(
                f"Request timed out after {self.timeout_seconds}s: "
                f"{scope['method']} {scope['path']}"
            )
            # A response already on the wire cannot be replaced
            if response_started:
                return
            await error_response(GatewayTimeoutError())(scope, receive, send)
