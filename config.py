import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler

load_dotenv()

@dataclass
class Settings:
    # API settings
    api_host: str = os.getenv("API_HOST", "127.0.0.1")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_key: str = os.getenv("API_KEY", "super-secret-key")

    # Catalog seed (JSON list of items); the built-in demo items are used when unset
    seed_file: Optional[str] = os.getenv("LIBRARY_SEED_FILE")

    # Lending defaults. The fine rate itself is fixed in library.py.
    default_loan_days: int = int(os.getenv("DEFAULT_LOAN_DAYS", "14"))

    # Application settings
    app_name: str = os.getenv("APP_NAME", "LibraNet Circulation Desk")
    app_version: str = os.getenv("APP_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "False").lower() in ("true", "1", "yes")
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()

_logging_configured = False


def configure_logging(level: Optional[str] = None) -> None:
    """Install a rich log handler on the root logger (only once per process)."""
    global _logging_configured
    if _logging_configured:
        return
    level_name = (level or ("DEBUG" if settings.debug else settings.log_level)).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)],
    )
    _logging_configured = True
