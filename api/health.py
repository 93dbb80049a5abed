import logging

from flask import Blueprint
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from api.extensions import get_storage

logger = logging.getLogger(__name__)

bp = Blueprint("health", __name__)


@bp.get("/health")
def health():
    """
    Health check (API process and database)
    ---
    tags:
      - Health
    responses:
      200:
        description: API and database are up
        schema:
          type: object
          properties:
            success: { type: boolean }
            status: { type: string, example: ok }
            database: { type: string, example: ok }
      503:
        description: Database unreachable
    """
    try:
        get_storage().get_session().execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Health check could not reach the database")
        return {"success": False, "status": "degraded", "database": "unavailable"}, 503
    return {"success": True, "status": "ok", "database": "ok", "version": "1.0.0"}, 200
