from starlette.types import ASGIApp, Receive, Scope, Send

from core.logger import get_category_logger
from middlewares.auth import current_user_id


class ErrorLoggingMiddleware:
    """Loga exceções não tratadas na categoria ERROR e repassa a mesma exceção."""

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        try:
            await self.app(scope, receive, send)
        except Exception as exc:
            method = scope.get("method", "")
            path = scope.get("path", "")
            client = scope.get("client")
            get_category_logger().error(
                f"[{method} {path}] {exc}",
                exc,
                {
                    "userId": current_user_id(scope.get("state")),
                    "path": path,
                    "method": method,
                    "ip": client[0] if client else None,
                },
            )
            raise
