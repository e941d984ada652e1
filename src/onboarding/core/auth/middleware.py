"""Actor context middleware.

Reads the bearer token (when present) and exposes the caller's identity
on ``request.state`` and in the structlog context. Authorization itself
happens in the route dependencies.
"""

from typing import TYPE_CHECKING

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from onboarding.core.auth.backend import decode_token


if TYPE_CHECKING:
    from starlette.types import ASGIApp


class ActorContextMiddleware(BaseHTTPMiddleware):
    """Bind ``user_id`` and ``role`` from the access token for logging.

    Attributes:
        exclude_paths: Paths that never carry a token
    """

    def __init__(
        self,
        app: "ASGIApp",
        exclude_paths: list[str] | None = None,
    ) -> None:
        super().__init__(app)
        self.exclude_paths = exclude_paths or [
            "/health",
            "/docs",
            "/redoc",
            "/openapi.json",
        ]

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        if any(request.url.path.startswith(path) for path in self.exclude_paths):
            return await call_next(request)

        auth_header = request.headers.get("Authorization")
        if auth_header and auth_header.startswith("Bearer "):
            token_data = decode_token(auth_header.split(" ", 1)[1])

            if token_data:
                request.state.user_id = token_data.user_id
                request.state.role = token_data.role
                structlog.contextvars.bind_contextvars(
                    user_id=token_data.user_id,
                    role=token_data.role,
                )

        return await call_next(request)
