from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from core.logger import get_category_logger
from core.security import create_access_token
from middlewares.login_guard import enforce_login_attempts, get_login_guard
from schemas.auth import LoginFailure, LoginRequest, LoginResponse
from services.account_service import AccountService, get_account_service

router = APIRouter(tags=["auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={401: {"model": LoginFailure}, 429: {"description": "IP bloqueado temporariamente"}},
)
async def login(
    body: LoginRequest,
    ip: str = Depends(enforce_login_attempts),
    accounts: AccountService = Depends(get_account_service),
):
    guard = get_login_guard()
    user = accounts.authenticate(body.email, body.password)

    if user is None:
        remaining = guard.register_failure(ip)
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"message": "Invalid credentials", "attemptsRemaining": max(0, remaining)},
        )

    # login ok: zera o contador do IP
    guard.register_success(ip)
    token = create_access_token({"id": user["id"], "email": user["email"]})
    get_category_logger().user_action("login", user["id"], {"email": user["email"], "ip": ip})

    return {"message": "Login successful", "token": token, "user": user}
