import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.asynchronous.collection import AsyncCollection

from users_api.users.models import User, UserCreate

logger = logging.getLogger(__name__)

Projection = Mapping[str, Any] | None

# Default read view: credentials never leave the store unless asked for.
PUBLIC_VIEW: Mapping[str, int] = MappingProxyType({
    "authentication.password": 0,
    "authentication.salt": 0,
    "authentication.sessionToken": 0,
})

# Full document, credentials included.
CREDENTIALS_VIEW: Projection = None

# The delete filter keys on "_d", not "_id", so it matches no document.
# Kept as-is until the intended behaviour is confirmed; see DESIGN.md.
DELETE_FILTER_KEY = "_d"


def _object_id(user_id: str | ObjectId) -> ObjectId | None:
    if isinstance(user_id, ObjectId):
        return user_id
    if not ObjectId.is_valid(user_id):
        return None
    return ObjectId(user_id)


def _projection(projection: Projection) -> dict[str, Any] | None:
    if projection is None:
        return None
    return dict(projection)


def _to_user(document: Mapping[str, Any] | None) -> User | None:
    if document is None:
        return None
    return User.model_validate(document)


class UserRepository:
    def __init__(self, collection: AsyncCollection):
        self.collection = collection

    async def list_users(self, projection: Projection = PUBLIC_VIEW) -> list[User]:
        documents = await self.collection.find({}, _projection(projection)).to_list()
        return [User.model_validate(document) for document in documents]

    async def get_user_by_email(
        self, email: str, projection: Projection = PUBLIC_VIEW
    ) -> User | None:
        document = await self.collection.find_one({"email": email}, _projection(projection))
        return _to_user(document)

    async def get_user_by_session_token(
        self, session_token: str, projection: Projection = PUBLIC_VIEW
    ) -> User | None:
        document = await self.collection.find_one(
            {"authentication.sessionToken": session_token}, _projection(projection)
        )
        return _to_user(document)

    async def get_user_by_id(
        self, user_id: str | ObjectId, projection: Projection = PUBLIC_VIEW
    ) -> User | None:
        object_id = _object_id(user_id)
        if object_id is None:
            logger.debug("Malformed user id %r", user_id)
            return None
        document = await self.collection.find_one({"_id": object_id}, _projection(projection))
        return _to_user(document)

    async def create_user(self, fields: Mapping[str, Any]) -> User:
        """Validate ``fields`` against the user schema and insert them.

        Unknown keys are dropped. The returned user is the persisted
        document, authentication sub-document included.

        Raises:
            pydantic.ValidationError: a required field is missing or empty.
        """
        user = UserCreate.model_validate(fields)
        document = user.model_dump(by_alias=True, exclude_none=True)
        result = await self.collection.insert_one(document)
        document["_id"] = result.inserted_id
        logger.debug("Created user %s", result.inserted_id)
        return User.model_validate(document)

    async def delete_user_by_id(self, user_id: str | ObjectId) -> User | None:
        document = await self.collection.find_one_and_delete(
            {DELETE_FILTER_KEY: user_id}, projection=_projection(PUBLIC_VIEW)
        )
        if document is None:
            logger.debug("No user deleted for id %s", user_id)
        return _to_user(document)

    async def update_user_by_id(
        self,
        user_id: str | ObjectId,
        fields: Mapping[str, Any],
        projection: Projection = PUBLIC_VIEW,
        return_document: bool = ReturnDocument.BEFORE,
    ) -> User | None:
        """Apply a partial update and return the document.

        ``fields`` is written with ``$set`` as given, without validation.
        By default the document is returned as it was before the update;
        pass ``ReturnDocument.AFTER`` for the updated one.
        """
        object_id = _object_id(user_id)
        if object_id is None:
            logger.debug("Malformed user id %r", user_id)
            return None
        if not fields:
            document = await self.collection.find_one({"_id": object_id}, _projection(projection))
            return _to_user(document)
        document = await self.collection.find_one_and_update(
            {"_id": object_id},
            {"$set": dict(fields)},
            projection=_projection(projection),
            return_document=return_document,
        )
        return _to_user(document)
