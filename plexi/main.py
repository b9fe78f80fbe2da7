from contextlib import asynccontextmanager
import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Configure root logger so all plexi.* module loggers emit to console
logging.basicConfig(
    level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO),
    format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

from plexi.config import settings
from plexi.onchain.errors import ConfigurationError
from plexi.routes import admin, health, vault, wallet
from plexi.services.chain import close_vault_client, get_vault_client
from plexi.session import reset_wallet_session


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = logging.getLogger(__name__)
    try:
        client = get_vault_client()
        logger.info("Chain config: %s", client.get_config().safe_dict())
    except ConfigurationError as exc:
        logger.error("Vault client not configured (vault endpoints return 503): %s", exc)

    yield

    reset_wallet_session()
    await close_vault_client()


app = FastAPI(
    title="Plexi Vault API",
    description="Read and operator API for the Plexi yield vault",
    version=settings.api_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, tags=["Health"])
app.include_router(vault.router)
app.include_router(wallet.router)
app.include_router(admin.router)


@app.get("/")
async def root() -> dict:
    return {"message": "Plexi Vault API", "docs": "/docs"}
