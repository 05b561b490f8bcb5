# admin_identity/db/models/activity_log_model.py
"""
Activity log entries embedded in an admin account.

Entries are only ever appended ($push) and never rewritten.
"""

from datetime import datetime
from typing import Any, Dict
from pydantic import BaseModel, Field

from admin_identity.utils.time_utils import utcnow


class ActivityEntry(BaseModel):
    """One audit entry"""

    action: str
    timestamp: datetime = Field(default_factory=utcnow)
    details: Dict[str, Any] = Field(default_factory=dict)

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "action": "login",
                "timestamp": "2024-01-01T12:00:00Z",
                "details": {"ip_address": "1.2.3.4"},
            }
        }
