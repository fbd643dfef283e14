"""
GERPAAS Spec Sync API
FastAPI service that assigns article codes, categories, quantities and
catalog descriptions to cable-tray model elements.
"""
import os
import logging
from dotenv import load_dotenv
from fastapi import FastAPI

from gerpaas import config
from gerpaas.services.logging_config import setup_logging
from gerpaas.services.middleware import RequestTimingMiddleware

# Load .env before reading any setting
load_dotenv()

_log_level = os.getenv("LOG_LEVEL", "INFO")
_json_logs = os.getenv("LOG_FORMAT", "json").lower() != "text"
setup_logging(level=_log_level, json_output=_json_logs, log_file=os.getenv("GERPAAS_LOG_FILE") or None)
logger = logging.getLogger("gerpaas-api")

VERSION = "1.0.0"

app = FastAPI(
    title="GERPAAS Spec Sync API",
    version=VERSION,
    description="Article code synthesis and specification sync for DKC cable trays",
)
app.add_middleware(RequestTimingMiddleware)

from gerpaas.api.sync_routes import router as sync_router  # noqa: E402

app.include_router(sync_router)

for path in (config.family_map_path(), config.catalog_db_path()):
    if not path.exists():
        logger.warning("Data file not found: %s", path)


@app.get("/health")
async def health_check():
    return {
        "status": "active",
        "version": VERSION,
        "family_map_found": config.family_map_path().exists(),
        "catalog_found": config.catalog_db_path().exists(),
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("gerpaas.main:app", host="0.0.0.0", port=8000, reload=True)
