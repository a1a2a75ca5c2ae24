import time
from typing import Any, Dict

from starlette.datastructures import QueryParams
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from core.logger import get_category_logger
from middlewares.auth import current_user_id


def _request_details(scope: Scope) -> Dict[str, Any]:
    params = {k: v for k, v in (scope.get("path_params") or {}).items() if v not in (None, "")}
    query = {k: v for k, v in QueryParams(scope.get("query_string", b"")).items() if v != ""}
    return {
        "params": params or None,
        "query": query or None,
    }


class HttpLoggingMiddleware:
    """
    Registra uma linha HTTP por request (método, path, status, duração, usuário).
    O log é escrito no momento em que a resposta começa a sair, antes de
    repassar a mensagem ao servidor; só uma vez por request.
    """
    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        start = time.perf_counter()
        logged = False

        def log_response(status_code: int) -> None:
            nonlocal logged
            logged = True
            duration_ms = (time.perf_counter() - start) * 1000
            get_category_logger().http(
                scope.get("method", ""),
                scope.get("path", ""),
                status_code,
                duration_ms,
                current_user_id(scope.get("state")),
                _request_details(scope),
            )

        async def inner_send(message: Message):
            if message["type"] == "http.response.start" and not logged:
                log_response(message["status"])
            await send(message)

        try:
            await self.app(scope, receive, inner_send)
        except Exception:
            # o 500 sai pelo ServerErrorMiddleware, fora deste middleware
            if not logged:
                log_response(500)
            raise
