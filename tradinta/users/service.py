"""User service — role assignment and per-user permission restrictions."""

from datetime import datetime, timezone
from typing import Iterable

from motor.motor_asyncio import AsyncIOMotorDatabase
from fastapi import HTTPException, status

from tradinta.activity import ActivityActionEnum, ActivityService
from tradinta.config import settings
from tradinta.rbac import resolver
from tradinta.utils import parse_object_id, serialize_mongo_doc


class UserService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.users = db["users"]
        self.activity = ActivityService(db)

    async def _find_user(self, user_id: str) -> dict:
        oid = parse_object_id(user_id, "user ID")
        user = await self.users.find_one({"_id": oid, "is_deleted": {"$ne": True}})
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="User not found"
            )
        return user

    @staticmethod
    def _role_of(user: dict) -> str:
        return user.get("role") or settings.default_role

    def _present(self, user: dict) -> dict:
        """Serialize a user document, hide the password, attach effective permissions."""
        role = self._role_of(user)
        restrictions = user.get("restricted_permissions") or []
        safe = serialize_mongo_doc(user)
        safe.pop("password", None)
        safe["role"] = role
        safe["restricted_permissions"] = list(restrictions)
        safe["effective_permissions"] = sorted(
            resolver.effective_permissions(role, restrictions)
        )
        return safe

    async def get_user(self, user_id: str) -> dict:
        """Get a single user with their effective permission set."""
        return self._present(await self._find_user(user_id))

    async def get_permission_toggles(self, user_id: str) -> dict:
        """
        Everything the user's role grants, grouped by resource, each entry
        flagged with whether the user currently keeps it.
        """
        user = await self._find_user(user_id)
        role = self._role_of(user)
        restricted = set(user.get("restricted_permissions") or [])
        granted = resolver.expand_role_permissions(role)

        groups = resolver.catalog.group_by_resource(granted)
        return {
            "user_id": user_id,
            "role": role,
            "groups": {
                title: [
                    {"permission": p, "allowed": p not in restricted}
                    for p in permissions
                ]
                for title, permissions in groups.items()
            },
        }

    async def update_restrictions(
        self,
        user_id: str,
        allowed_permissions: Iterable[str],
        actor: dict | None = None,
    ) -> dict:
        """
        Store as restrictions every role permission missing from
        `allowed_permissions`. Entries outside the role's grants are ignored.
        """
        user = await self._find_user(user_id)
        role = self._role_of(user)
        granted = resolver.expand_role_permissions(role)
        restricted = sorted(granted - set(allowed_permissions))

        updated = await self.users.find_one_and_update(
            {"_id": user["_id"]},
            {
                "$set": {
                    "restricted_permissions": restricted,
                    "updated_at": datetime.now(timezone.utc),
                }
            },
            return_document=True,
        )
        if not updated:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="User not found"
            )

        actor = actor or {}
        await self.activity.log(
            action=ActivityActionEnum.USER_RESTRICTIONS_UPDATED.value,
            details=(
                f"Updated restrictions for {user.get('name', user_id)} (ID: {user_id}). "
                f"New restrictions: [{', '.join(restricted)}]"
            ),
            user_id=actor.get("sub"),
            user_email=actor.get("email"),
        )
        return self._present(updated)

    async def set_role(
        self,
        user_id: str,
        role_key: str,
        actor: dict | None = None,
    ) -> dict:
        """
        Assign a new role. Stored restrictions the new role does not grant
        are dropped.
        """
        if resolver.registry.lookup(role_key) is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Unknown role '{role_key}'",
            )

        user = await self._find_user(user_id)
        previous = self._role_of(user)
        granted = resolver.expand_role_permissions(role_key)
        restricted = sorted(
            p for p in user.get("restricted_permissions") or [] if p in granted
        )

        updated = await self.users.find_one_and_update(
            {"_id": user["_id"]},
            {
                "$set": {
                    "role": role_key,
                    "restricted_permissions": restricted,
                    "updated_at": datetime.now(timezone.utc),
                }
            },
            return_document=True,
        )
        if not updated:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="User not found"
            )

        actor = actor or {}
        await self.activity.log(
            action=ActivityActionEnum.USER_ROLE_UPDATED.value,
            details=(
                f"Changed role of {user.get('name', user_id)} (ID: {user_id}) "
                f"from {previous} to {role_key}"
            ),
            user_id=actor.get("sub"),
            user_email=actor.get("email"),
        )
        return self._present(updated)
