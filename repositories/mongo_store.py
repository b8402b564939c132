"""MongoDB implementation of CredentialStore.

Two collections, both keyed by ``_id = email``:
- ``users`` — UserDoc
- ``otps``  — OtpDoc (one live record per email, replaced on every issue)

Driver failures are re-raised as InfrastructureError so the HTTP layer
reports them as an upstream failure; nothing here retries.
"""

from datetime import datetime
from typing import Optional

from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError, PyMongoError

from errors import InfrastructureError
from schemas.models.otp import OtpDoc, OtpPurpose
from schemas.models.user import UserDoc
from shared.logging import get_logger

log = get_logger(__name__)

USERS_COLLECTION = "users"
OTPS_COLLECTION = "otps"


def _store_error(operation: str, e: PyMongoError) -> InfrastructureError:
    log.error(
        "credential_store_error",
        operation=operation,
        error=str(e),
        error_type=type(e).__name__,
    )
    return InfrastructureError("credential store unavailable", code="store_unavailable")


class MongoCredentialStore:
    def __init__(self, db: AsyncDatabase) -> None:
        self._db = db
        self._users = db[USERS_COLLECTION]
        self._otps = db[OTPS_COLLECTION]

    async def get_user(self, email: str) -> Optional[UserDoc]:
        try:
            doc = await self._users.find_one({"_id": email})
        except PyMongoError as e:
            raise _store_error("get_user", e) from e
        return UserDoc.from_mongo(doc)

    async def create_user(self, user: UserDoc) -> bool:
        try:
            await self._users.insert_one(user.to_mongo())
        except DuplicateKeyError:
            return False
        except PyMongoError as e:
            raise _store_error("create_user", e) from e
        return True

    async def upsert_user(self, user: UserDoc) -> None:
        try:
            await self._users.replace_one(
                {"_id": user.email}, user.to_mongo(), upsert=True
            )
        except PyMongoError as e:
            raise _store_error("upsert_user", e) from e

    async def get_otp(self, email: str) -> Optional[OtpDoc]:
        try:
            doc = await self._otps.find_one({"_id": email})
        except PyMongoError as e:
            raise _store_error("get_otp", e) from e
        return OtpDoc.from_mongo(doc)

    async def upsert_otp(self, record: OtpDoc) -> None:
        try:
            await self._otps.replace_one(
                {"_id": record.email}, record.to_mongo(), upsert=True
            )
        except PyMongoError as e:
            raise _store_error("upsert_otp", e) from e

    async def clear_otp_code(
        self, email: str, purpose: OtpPurpose, created_at: datetime
    ) -> bool:
        try:
            result = await self._otps.update_one(
                {"_id": email, "created_at": created_at},
                {"$set": {OtpDoc.field_for(purpose): 0}},
            )
        except PyMongoError as e:
            raise _store_error("clear_otp_code", e) from e
        return result.matched_count == 1

    async def ping(self) -> bool:
        try:
            await self._db.client.admin.command("ping")
            return True
        except PyMongoError:
            return False
