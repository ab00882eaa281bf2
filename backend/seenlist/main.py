import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from seenlist.core.config import get_settings
from seenlist.db import Base, SessionLocal, engine
from seenlist.routers import admin, health, invitations, lists
from seenlist.services.migration_service import migrate_collaborators
from seenlist import models  # noqa: F401  ensure models are imported

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="SeenList API",
    description="Shared movie and TV series watch lists",
    version="1.0.0"
)

origins_env = settings.CORS_ALLOW_ORIGINS or ""
origins = [o.strip() for o in origins_env.split(",") if o.strip()] or [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(lists.router)
app.include_router(lists.shared_router)
app.include_router(invitations.router)
app.include_router(admin.router)


@app.on_event("startup")
def init_db():
    # Idempotent: only missing tables are created
    if settings.AUTO_CREATE_TABLES:
        Base.metadata.create_all(bind=engine)

    if settings.AUTO_MIGRATE_COLLABORATORS:
        db = SessionLocal()
        try:
            migrate_collaborators(db)
        finally:
            db.close()
    logger.info(f"SeenList API started ({settings.ENVIRONMENT})")
