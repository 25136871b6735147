import logging

from fastapi import Request
from pymongo import ASCENDING, AsyncMongoClient
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import ConnectionFailure

from users_api.settings import AppSettings, app_settings

logger = logging.getLogger(__name__)

DEFAULT_DATABASE = "users_api"

# Transport failures are the driver's own exceptions, re-exported under the
# name callers handle. Nothing in this package catches or wraps them.
StoreUnavailable = ConnectionFailure


def create_client(settings: AppSettings = app_settings) -> AsyncMongoClient:
    return AsyncMongoClient(
        settings.mongodb_url,
        serverSelectionTimeoutMS=settings.mongodb_server_selection_timeout_ms,
    )


def users_collection(
    client: AsyncMongoClient, settings: AppSettings = app_settings
) -> AsyncCollection:
    """Return the users collection.

    An explicit ``mongodb_database`` wins; otherwise the database named in
    the connection string, as already parsed by the client, then
    DEFAULT_DATABASE.
    """
    if settings.mongodb_database:
        database = client[settings.mongodb_database]
    else:
        database = client.get_default_database(DEFAULT_DATABASE)
    return database[settings.users_collection]


async def ensure_indexes(collection: AsyncCollection) -> None:
    """Create the secondary lookup indexes. Neither is unique."""
    await collection.create_index([("email", ASCENDING)])
    await collection.create_index([("authentication.sessionToken", ASCENDING)])
    logger.debug("Indexes ensured on %s", collection.full_name)


def get_users_collection(request: Request) -> AsyncCollection:
    return request.app.state.users_collection
