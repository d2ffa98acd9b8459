from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from .utils import redact_url, resolve_sqlite_url

logger = logging.getLogger(__name__)

# Get DB url
load_dotenv()
# Project root directory (repo root)
ROOT_DIR = Path(__file__).resolve().parents[2]
DEFAULT_SQLITE_URL = resolve_sqlite_url(
    os.getenv("DB_URL", "sqlite:///./dev.db"), ROOT_DIR
)


def make_engine(database_url: Optional[str] = None, echo: bool = False):
    url = database_url or DEFAULT_SQLITE_URL
    logger.debug(f"Creating engine for {redact_url(url)}")
    return create_engine(url, echo=echo, future=True)


def get_sessionmaker(engine):
    return sessionmaker(
        bind=engine,
        # Settled rounds are read back by claimants after commit.
        expire_on_commit=False,
        future=True,
    )
