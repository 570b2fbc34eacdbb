"""Authentication service — email/password login issuing identity JWTs."""

from datetime import datetime, timezone

from motor.motor_asyncio import AsyncIOMotorDatabase
from fastapi import HTTPException, status

from tradinta.config import settings
from tradinta.rbac import resolver
from tradinta.utils import serialize_mongo_doc
from .helpers import verify_password, create_access_token


class AuthService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.users = db["users"]

    async def authenticate(self, email: str, password: str) -> dict:
        """
        1. Look up the user by email.
        2. Verify password and account status.
        3. Return an identity-only JWT and the user with effective permissions.
        """
        user = await self.users.find_one({"email": email.lower()})
        if not user or not verify_password(password, user.get("password")):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid credentials",
            )

        if not user.get("is_active", True):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Account is deactivated",
            )

        role = user.get("role") or settings.default_role
        restrictions = list(user.get("restricted_permissions") or [])

        token = create_access_token(str(user["_id"]), email=user["email"])

        await self.users.update_one(
            {"_id": user["_id"]},
            {"$set": {"last_login": datetime.now(timezone.utc)}},
        )

        safe = serialize_mongo_doc(user)
        safe.pop("password", None)
        safe["role"] = role
        safe["effective_permissions"] = sorted(
            resolver.effective_permissions(role, restrictions)
        )
        return {"access_token": token, "token_type": "bearer", "user": safe}
