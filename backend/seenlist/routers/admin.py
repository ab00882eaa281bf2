import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from seenlist.core.config import get_settings
from seenlist.core.exceptions import UnauthorizedError
from seenlist.db import get_db
from seenlist.routers.common import handle_exception
from seenlist.schemas.media_list import MigrationResult
from seenlist.services.migration_service import migrate_collaborators

router = APIRouter(prefix="/admin", tags=["admin"])
logger = logging.getLogger(__name__)


@router.post("/migrate-collaborators", response_model=MigrationResult)
def run_collaborator_migration(
    key: str = Query(..., description="Migration secret key"),
    db: Session = Depends(get_db),
):
    try:
        if key != get_settings().MIGRATION_SECRET_KEY:
            logger.warning("Rejected collaborator migration request with a wrong key")
            raise UnauthorizedError()
        migrated = migrate_collaborators(db)
        return MigrationResult(
            success=True,
            message=f"Migration completed successfully. {migrated} lists updated.",
            migrated=migrated,
        )
    except Exception as e:
        raise handle_exception(e)
