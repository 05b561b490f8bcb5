# admin_identity/db/admin_repository.py
"""
MongoDB access for admin accounts.

Every write is a single-document atomic operation. PyMongo failures are
translated to PersistenceError here so services only see typed errors.
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from admin_identity.core.errors import ConflictError, NotFoundError, PersistenceError
from admin_identity.db.models.activity_log_model import ActivityEntry
from admin_identity.db.models.admin_model import MUTABLE_FIELDS, AdminAccount
from admin_identity.utils.time_utils import utcnow

logger = logging.getLogger(__name__)

FIRST_ADMIN_MARKER_ID = "first_admin"


@contextmanager
def _store_errors(operation: str):
    try:
        yield
    except DuplicateKeyError:
        raise
    except PyMongoError as exc:
        logger.error("Admin store failure during %s: %s", operation, exc)
        raise PersistenceError(f"Admin store failure during {operation}") from exc


def _object_id(admin_id: str) -> ObjectId:
    if not admin_id:
        raise NotFoundError()
    try:
        return ObjectId(admin_id)
    except (InvalidId, TypeError):
        raise NotFoundError()


class AdminRepository:
    def __init__(self, db):
        """
        db is Motor database object (async)
        e.g. db = await get_database()
        """
        self.db = db
        self.admins = db["admins"]
        self.markers = db["bootstrap_markers"]

    # create helpful indexes (run at startup)
    async def ensure_indexes(self):
        with _store_errors("index creation"):
            await self.admins.create_index([("email", ASCENDING)], unique=True)
            await self.admins.create_index([("reset_token", ASCENDING)], sparse=True)
            await self.admins.create_index([("reset_token_expiry", ASCENDING)], sparse=True)

    # -----------------------------
    # READS
    # -----------------------------
    async def has_any(self) -> bool:
        with _store_errors("admin existence check"):
            doc = await self.admins.find_one({}, {"_id": 1})
        return doc is not None

    async def find_by_id(self, admin_id: str) -> Optional[AdminAccount]:
        oid = _object_id(admin_id)
        with _store_errors("admin lookup"):
            doc = await self.admins.find_one({"_id": oid})
        return AdminAccount.from_document(doc)

    async def find_by_email(self, email: str) -> Optional[AdminAccount]:
        if not email:
            return None
        with _store_errors("admin lookup"):
            doc = await self.admins.find_one({"email": email.strip().lower()})
        return AdminAccount.from_document(doc)

    async def find_by_reset_token(self, token: str) -> Optional[AdminAccount]:
        if not token:
            return None
        with _store_errors("reset token lookup"):
            doc = await self.admins.find_one({"reset_token": token})
        return AdminAccount.from_document(doc)

    async def get_activity_log(self, admin_id: str) -> List[ActivityEntry]:
        oid = _object_id(admin_id)
        with _store_errors("activity log read"):
            doc = await self.admins.find_one({"_id": oid}, {"activity_log": 1})
        if doc is None:
            raise NotFoundError()
        return [ActivityEntry(**entry) for entry in doc.get("activity_log", [])]

    # -----------------------------
    # WRITES
    # -----------------------------
    async def insert(self, account: AdminAccount) -> AdminAccount:
        """
        Insert a new account. A staged password is hashed first; if hashing
        fails nothing is written.
        """
        digest = account.hash_pending_password()
        if digest is None and not account.password_hash:
            raise PersistenceError("Refusing to store an admin without a password")

        doc = account.to_document()
        if digest is not None:
            doc["password_hash"] = digest

        try:
            with _store_errors("admin insert"):
                result = await self.admins.insert_one(doc)
        except DuplicateKeyError:
            raise ConflictError("An admin with this email already exists")

        if digest is not None:
            account.mark_password_saved(digest)
        account.id = str(result.inserted_id)
        return account

    async def save(
        self,
        account: AdminAccount,
        fields: Optional[Iterable[str]] = None,
        conditions: Optional[Dict[str, Any]] = None,
    ) -> AdminAccount:
        """
        Persist mutable fields of an existing account.

        The password digest is only recomputed when a new password was
        staged with set_password(); other saves leave it untouched.
        `conditions` are extra filter terms the stored document must still
        match, otherwise NotFoundError is raised and nothing is written.
        """
        names = list(fields) if fields is not None else list(MUTABLE_FIELDS)
        dumped = account.model_dump(include=set(names))
        update: Dict[str, Any] = {name: dumped[name] for name in names if name in MUTABLE_FIELDS}

        digest = account.hash_pending_password()
        if digest is not None:
            update["password_hash"] = digest

        saved = await self.update_fields(account.id, update, conditions=conditions)
        if digest is not None:
            account.mark_password_saved(digest)
        account.updated_at = saved.updated_at
        return saved

    async def update_fields(
        self,
        admin_id: str,
        fields: Dict[str, Any],
        conditions: Optional[Dict[str, Any]] = None,
    ) -> AdminAccount:
        """Atomic $set of the given fields; returns the stored account."""
        query: Dict[str, Any] = dict(conditions or {})
        query["_id"] = _object_id(admin_id)
        update = dict(fields)
        update["updated_at"] = utcnow()
        with _store_errors("admin update"):
            doc = await self.admins.find_one_and_update(
                query,
                {"$set": update},
                return_document=ReturnDocument.AFTER,
            )
        if doc is None:
            raise NotFoundError()
        return AdminAccount.from_document(doc)

    async def append_activity(self, admin_id: str, entry: ActivityEntry) -> None:
        oid = _object_id(admin_id)
        with _store_errors("activity log append"):
            result = await self.admins.update_one(
                {"_id": oid},
                {"$push": {"activity_log": entry.model_dump()}},
            )
        if result.matched_count == 0:
            raise NotFoundError()

    async def clear_expired_reset_tokens(self, now: datetime) -> int:
        with _store_errors("reset token sweep"):
            result = await self.admins.update_many(
                {"reset_token_expiry": {"$ne": None, "$lte": now}},
                {"$set": {"reset_token": None, "reset_token_expiry": None, "updated_at": now}},
            )
        return result.modified_count

    # -----------------------------
    # BOOTSTRAP MARKER
    # -----------------------------
    async def claim_first_admin_marker(self, email: str) -> bool:
        """
        Insert the singleton bootstrap marker. The _id is fixed, so only one
        insert can ever succeed; returns False for the loser.
        """
        try:
            with _store_errors("bootstrap marker insert"):
                await self.markers.insert_one({
                    "_id": FIRST_ADMIN_MARKER_ID,
                    "email": email,
                    "created_at": utcnow(),
                })
        except DuplicateKeyError:
            return False
        return True

    async def release_first_admin_marker(self) -> None:
        with _store_errors("bootstrap marker release"):
            await self.markers.delete_one({"_id": FIRST_ADMIN_MARKER_ID})

    async def attach_first_admin_marker(self, admin_id: str) -> None:
        with _store_errors("bootstrap marker update"):
            await self.markers.update_one(
                {"_id": FIRST_ADMIN_MARKER_ID},
                {"$set": {"admin_id": admin_id}},
            )
