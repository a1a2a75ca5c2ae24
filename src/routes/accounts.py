from typing import Any, Dict

from fastapi import APIRouter, Depends

from middlewares.auth import auth_required

router = APIRouter(prefix="/api", tags=["accounts"])


@router.get("/me")
async def me(user: Dict[str, Any] = Depends(auth_required)):
    return {"id": user.get("id"), "email": user.get("email")}
