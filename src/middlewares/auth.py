from typing import Any, Dict, Optional

import jwt
from fastapi import HTTPException, Request, status

from core.logger import get_category_logger
from core.security import decode_access_token

ACTION = "token_verification"


class TokenVerificationError(Exception):
    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


def verify_token(authorization: Optional[str], path: str, method: str) -> Dict[str, Any]:
    """
    Verifica o header Authorization e registra o resultado na categoria AUTH.
    Não decide a resposta HTTP: em caso de falha levanta TokenVerificationError.
    """
    logger = get_category_logger()

    if not authorization or not authorization.startswith("Bearer "):
        reason = "Token not provided"
        logger.auth(ACTION, "unknown", "failure", {"reason": reason, "path": path, "method": method})
        raise TokenVerificationError(reason)

    token = authorization.split(" ", 1)[1].strip()
    try:
        payload = decode_access_token(token)
    except jwt.PyJWTError as e:
        logger.auth(ACTION, "unknown", "failure", {"reason": str(e), "path": path, "method": method})
        raise TokenVerificationError(str(e)) from e

    identifier = payload.get("email") or payload.get("id") or "unknown"
    logger.auth(ACTION, identifier, "success", {"path": path, "method": method})
    return payload


async def auth_required(request: Request) -> Dict[str, Any]:
    """Dependência das rotas protegidas; deixa o usuário em request.state.user."""
    try:
        payload = verify_token(
            request.headers.get("authorization"),
            request.url.path,
            request.method,
        )
    except TokenVerificationError as e:
        detail = "Token not provided" if e.reason == "Token not provided" else "Invalid or expired token"
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)
    request.state.user = payload
    return payload


def current_user_id(state: Any) -> Any:
    """id do usuário autenticado guardado no scope, ou 'anonymous'."""
    user = None
    if isinstance(state, dict):
        user = state.get("user")
    else:
        user = getattr(state, "user", None)
    if isinstance(user, dict) and user.get("id") is not None:
        return user["id"]
    return "anonymous"
