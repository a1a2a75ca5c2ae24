from pydantic import BaseModel, EmailStr, Field


# ---------- Requests ----------
class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


# ---------- Responses ----------
class UserOut(BaseModel):
    id: str
    name: str
    email: EmailStr


class LoginResponse(BaseModel):
    message: str
    token: str
    user: UserOut


class LoginFailure(BaseModel):
    message: str
    attemptsRemaining: int
