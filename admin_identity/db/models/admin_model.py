# admin_identity/db/models/admin_model.py
"""
AdminAccount Model for the Veraawell admin panel.

Admin accounts live in their own 'admins' collection, separate from
patients and doctors. Passwords are only ever stored as bcrypt digests.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pydantic import BaseModel, EmailStr, Field, PrivateAttr, field_validator
from pydantic import ValidationError as PydanticValidationError

from admin_identity.core import security
from admin_identity.core.errors import ValidationError
from admin_identity.db.models.activity_log_model import ActivityEntry
from admin_identity.utils.time_utils import utcnow


class AdminRole(str, Enum):
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    MODERATOR = "moderator"


class AdminStatus(str, Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"


# Fields the repository may $set. activity_log is push-only, email and
# is_first_admin are fixed at creation.
MUTABLE_FIELDS = (
    "role",
    "first_name",
    "last_name",
    "is_password_changed",
    "status",
    "last_login",
    "reset_token",
    "reset_token_expiry",
)


class AdminAccount(BaseModel):
    """Admin account model for MongoDB storage"""

    id: Optional[str] = Field(None, alias="_id")
    email: EmailStr
    password_hash: Optional[str] = None
    role: AdminRole
    first_name: str
    last_name: str
    is_first_admin: bool = False
    is_password_changed: bool = False
    status: AdminStatus = AdminStatus.ACTIVE.value
    last_login: Optional[datetime] = None
    reset_token: Optional[str] = None
    reset_token_expiry: Optional[datetime] = None
    activity_log: List[ActivityEntry] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    # Plaintext waiting to be hashed by the next save; never serialized
    _pending_password: Optional[str] = PrivateAttr(default=None)

    class Config:
        populate_by_name = True
        use_enum_values = True
        validate_assignment = True
        json_schema_extra = {
            "example": {
                "email": "admin@veraawell.com",
                "password_hash": "$2b$10$...",
                "role": "super_admin",
                "first_name": "Super",
                "last_name": "Admin",
                "is_first_admin": True,
                "is_password_changed": False,
                "status": "active",
                "last_login": None,
                "reset_token": None,
                "reset_token_expiry": None,
                "activity_log": [],
            }
        }

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_object_id(cls, value):
        if isinstance(value, ObjectId):
            return str(value)
        return value

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("first_name", "last_name")
    @classmethod
    def _require_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    # -----------------------------
    # PASSWORD
    # -----------------------------
    def set_password(self, plain_password: str) -> None:
        """Stage a new password. It is hashed when the account is saved."""
        self._pending_password = security.validate_password(plain_password)

    @property
    def has_pending_password(self) -> bool:
        return self._pending_password is not None

    def hash_pending_password(self) -> Optional[str]:
        """
        Hash the staged password, if any, and return the new digest.
        The staged plaintext is kept until mark_password_saved() so a
        failed write can be retried.
        """
        if self._pending_password is None:
            return None
        return security.hash_password(self._pending_password)

    def mark_password_saved(self, digest: str) -> None:
        self.password_hash = digest
        self._pending_password = None

    def compare_password(self, candidate: str) -> bool:
        return security.verify_password(candidate, self.password_hash)

    @property
    def requires_password_change(self) -> bool:
        return not self.is_password_changed

    # -----------------------------
    # RESET TOKEN
    # -----------------------------
    @property
    def has_pending_reset(self) -> bool:
        return self.reset_token is not None and self.reset_token_expiry is not None

    def is_reset_token_valid(self, now: Optional[datetime] = None) -> bool:
        """
        True while a reset token is stored and its expiry is still ahead.
        Expired tokens stay in storage until cleared or overwritten.
        """
        if not self.has_pending_reset:
            return False
        return self.reset_token_expiry > (now or utcnow())

    def reset_token_matches(self, candidate: Optional[str], now: Optional[datetime] = None) -> bool:
        return self.is_reset_token_valid(now) and security.tokens_match(candidate, self.reset_token)

    # -----------------------------
    # STATUS
    # -----------------------------
    @property
    def is_active(self) -> bool:
        return self.status == AdminStatus.ACTIVE.value

    @property
    def is_super_admin(self) -> bool:
        return self.role == AdminRole.SUPER_ADMIN.value

    # -----------------------------
    # SERIALIZATION
    # -----------------------------
    def to_document(self) -> Dict[str, Any]:
        """Insert document. The digest must already be computed."""
        return self.model_dump(exclude={"id"})

    def public_profile(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "role": self.role,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "status": self.status,
            "is_first_admin": self.is_first_admin,
            "requires_password_change": self.requires_password_change,
            "last_login": self.last_login,
            "created_at": self.created_at,
        }

    @classmethod
    def from_document(cls, doc: Optional[Dict[str, Any]]) -> Optional["AdminAccount"]:
        if doc is None:
            return None
        return cls.model_validate(doc)


def build_admin_account(**data: Any) -> AdminAccount:
    """Construct an account from caller input, raising our ValidationError."""
    try:
        return AdminAccount(**data)
    except PydanticValidationError as exc:
        errors = {
            ".".join(str(part) for part in err["loc"]) or "account": err["msg"]
            for err in exc.errors()
        }
        raise ValidationError("Invalid admin account data", errors=errors) from exc
