import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .xform import DEFAULT_SITE_ROOT

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def load_env() -> None:
    """Load .env from the working directory if present.
    Values already set in the environment win.
    """
    env_path = Path.cwd() / ".env"
    if not env_path.exists():
        return
    load_dotenv(dotenv_path=env_path)


@dataclass(frozen=True)
class Settings:
    site_root: str = DEFAULT_SITE_ROOT
    log_level: str = "INFO"
    log_dir: Optional[Path] = None


def get_settings() -> Settings:
    site_root = os.getenv("REDIRECTOR_SITE_ROOT", "").strip().rstrip("/")
    log_level = os.getenv("REDIRECTOR_LOG_LEVEL", "").strip().upper()
    log_dir = os.getenv("REDIRECTOR_LOG_DIR", "").strip()
    return Settings(
        site_root=site_root or DEFAULT_SITE_ROOT,
        log_level=log_level if log_level in LOG_LEVELS else "INFO",
        log_dir=Path(log_dir) if log_dir else None,
    )
