"""Activity log vocabulary — machine-readable keys of recorded admin actions."""

from enum import Enum


class ActivityActionEnum(str, Enum):
    USER_ROLE_UPDATED = "USER_ROLE_UPDATED"
    USER_RESTRICTIONS_UPDATED = "USER_RESTRICTIONS_UPDATED"
