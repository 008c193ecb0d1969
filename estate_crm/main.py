from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from estate_crm.core import config
from estate_crm.db.redis_client import redis_client
from estate_crm.db.session import init_db
from estate_crm.routers import agent, auth, chat, functions, lead, property

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if config.AUTO_CREATE_TABLES:
        await init_db()
    yield
    await redis_client.aclose()


app = FastAPI(
    title="Estate Bnk Listings & CRM",
    version="1.0.0",
    lifespan=lifespan,
)

# Browser clients call the function endpoints cross-origin (preflight included)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials="*" not in config.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Register Routers ---
app.include_router(auth.router)              # /api/v1/auth/*
app.include_router(lead.router)              # /api/v1/leads/*
app.include_router(agent.router)             # /api/v1/agents/*
app.include_router(property.router)          # /api/v1/properties/*
app.include_router(property.admin_router)    # /api/v1/admin/properties/*
app.include_router(chat.router)              # /api/v1/chat/*
app.include_router(functions.router)         # /functions/v1/*


# --- Root health check ---
@app.get("/")
async def root():
    return {"message": "Estate Bnk backend API is running"}
