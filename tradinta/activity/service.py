"""
Activity Service — record and query administrative actions.

Collection: activity_logs

Usage from other services:
    activity = ActivityService(db)
    await activity.log(
        action="USER_ROLE_UPDATED",
        details="Changed role of Jane (ID: ...) from buyer to support",
        user_id=actor.get("sub"), user_email=actor.get("email"),
    )
"""

from datetime import datetime, timezone

from motor.motor_asyncio import AsyncIOMotorDatabase

from tradinta.utils import Logger, serialize_mongo_doc

SYSTEM_USER_ID = "system"
SYSTEM_USER_EMAIL = "system@tradinta.com"

logger = Logger("activity")


class ActivityService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.logs = db["activity_logs"]

    async def log(
        self,
        action: str,
        details: str,
        user_id: str | None = None,
        user_email: str | None = None,
    ) -> dict | None:
        """
        Record an activity entry. Actions without an actor are attributed
        to the system user.

        A failed write is logged and returns None.
        """
        entry = {
            "action": action,
            "details": details,
            "user_id": user_id or SYSTEM_USER_ID,
            "user_email": user_email or SYSTEM_USER_EMAIL,
            "timestamp": datetime.now(timezone.utc),
        }
        try:
            result = await self.logs.insert_one(entry)
        except Exception as exc:
            logger.error(f"Failed to write activity log {action}: {exc}")
            return None

        entry["_id"] = result.inserted_id
        return serialize_mongo_doc(entry)

    async def list_logs(
        self,
        action: str | None = None,
        user_id: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[dict], int]:
        """Query activity logs, most recent first."""
        filters: dict = {}
        if action:
            filters["action"] = action
        if user_id:
            filters["user_id"] = user_id

        total = await self.logs.count_documents(filters)
        cursor = (
            self.logs.find(filters)
            .skip(offset)
            .limit(limit)
            .sort("timestamp", -1)
        )
        docs = [serialize_mongo_doc(d) async for d in cursor]
        return docs, total
