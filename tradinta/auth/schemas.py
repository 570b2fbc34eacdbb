from pydantic import BaseModel, EmailStr


class LoginRequest(BaseModel):
    """POST /auth/login"""
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    """`data` of a successful login."""
    access_token: str
    token_type: str = "bearer"
    user: dict


class LoginResponse(BaseModel):
    success: bool = True
    message: str
    data: TokenResponse
