# Core - Configuration
#
# Settings are read from environment variables, optionally seeded from a
# .env file in the working directory (python-dotenv).
# Cryptographic parameters and the auto-lock window are constants in
# eagledash.vault and are deliberately not configurable.

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "EAGLEDASH_"


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the vault service."""

    data_dir: Path = Path("./data")
    audit_dir: Path = Path("./audit_logs")
    host: str = "127.0.0.1"
    port: int = 8000

    @property
    def state_db_path(self) -> Path:
        """SQLite file holding the persisted application state."""
        return self.data_dir / "app_state.db"


def _env(name: str, default: str) -> str:
    return os.environ.get(f"{ENV_PREFIX}{name}", default)


def load_settings() -> Settings:
    """Build Settings from the environment (after loading .env, if any)."""
    load_dotenv(Path.cwd() / ".env")
    port = _env("PORT", "8000")
    try:
        port_number = int(port)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}PORT must be an integer, got {port!r}")

    return Settings(
        data_dir=Path(_env("DATA_DIR", "./data")),
        audit_dir=Path(_env("AUDIT_DIR", "./audit_logs")),
        host=_env("HOST", "127.0.0.1"),
        port=port_number,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings (loaded once)."""
    return load_settings()
