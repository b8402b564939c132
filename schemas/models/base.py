"""
Base model for all credential-store document models.

Records are keyed by the normalised email address, which doubles as the
MongoDB ``_id``. MongoBaseModel provides to_mongo() / from_mongo() for
round-tripping between Python objects and raw MongoDB dicts.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict


class MongoBaseModel(BaseModel):
    """
    Base for all document models.

    to_mongo()  — converts model → dict suitable for pymongo insert/replace
    from_mongo() — converts raw pymongo dict → model instance (returns None
                    gracefully when passed None)
    """

    model_config = ConfigDict(populate_by_name=True)

    email: str

    def to_mongo(self) -> dict:
        """Return a dict ready for MongoDB insertion, with ``_id`` set to the email."""
        data = self.model_dump()
        data["_id"] = self.email
        return data

    @classmethod
    def from_mongo(cls, data: Optional[dict]) -> Optional["MongoBaseModel"]:
        """Build a model instance from a raw MongoDB document dict.

        Returns None when data is None (e.g. find_one returns None).
        Missing optional fields are filled with their defaults.
        """
        if data is None:
            return None
        data = dict(data)
        data.pop("_id", None)
        return cls.model_validate(data)
