from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from tradinta.config import get_database
from tradinta.utils import success_response
from .schemas import LoginRequest, LoginResponse, TokenResponse
from .service import AuthService

auth_router = APIRouter()


@auth_router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Authenticate user and return JWT + user data."""
    svc = AuthService(db)
    result = TokenResponse(**await svc.authenticate(email=body.email, password=body.password))
    return success_response(data=result.model_dump(mode="json"), message="Login successful")
