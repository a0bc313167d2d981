"""FastAPI application entrypoint."""

# pylint: disable=duplicate-code

from pathlib import Path
from fastapi import FastAPI

from routes import deadlines
from config import config
from utils.logging import configure_logger

LOG_FILE = Path(config.LOG_DIR) / "server.log"
logger = configure_logger(__name__, LOG_FILE)

logger.info("Initializing FastAPI app")
app = FastAPI(title="Recurring deadlines")
app.include_router(deadlines.router)
logger.info("Routers registered")
