import logging

from fastapi import FastAPI

from app.api.grids import router as grids_router
from app.api.organizations import router as organizations_router
from app.api.users import router as users_router
from app.db import init_db
from app.errors import register_error_handlers
from app.logging import configure_logging
from app.services.table_config import GridRegistry

app = FastAPI(title="Survey Admin API")
logger = logging.getLogger(__name__)

configure_logging()
register_error_handlers(app)


def _include_api_router(router, dependencies=None):
    app.include_router(router, prefix="/api/v1", dependencies=dependencies)


_include_api_router(users_router)
_include_api_router(organizations_router)
_include_api_router(grids_router)


@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.on_event("startup")
def _create_tables():
    init_db()
    logger.info("Registered grids: %s", ", ".join(GridRegistry.keys()))
