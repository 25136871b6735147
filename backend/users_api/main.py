import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from users_api.database import (
    StoreUnavailable,
    create_client,
    ensure_indexes,
    users_collection,
)
from users_api.settings import app_settings
from users_api.users.router import router as users_router

logger = logging.getLogger(__name__)

logging.getLogger("users_api").setLevel(app_settings.log_level.upper())


@asynccontextmanager
async def lifespan(app: FastAPI):
    client = create_client(app_settings)
    collection = users_collection(client, app_settings)
    await ensure_indexes(collection)
    app.state.mongo_client = client
    app.state.users_collection = collection
    logger.info("Connected to MongoDB collection %s", collection.full_name)

    yield

    await client.close()
    logger.info("MongoDB client closed")


app = FastAPI(lifespan=lifespan)


@app.exception_handler(StoreUnavailable)
async def store_unavailable_handler(_request: Request, exc: StoreUnavailable):
    logger.error("Document store unreachable: %s", exc)
    return JSONResponse(status_code=503, content={"detail": "Store unavailable"})


app.include_router(users_router)
