import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from gmail_cleaner.errors import ConfigError

# Load .env once, globally
load_dotenv()

CONFIG_DIR_ENV = "GMAIL_CLEANER_CONFIG_DIR"
LOG_LEVEL_ENV = "GMAIL_CLEANER_LOG_LEVEL"
# Undocumented on purpose: full scope allows irreversible deletion.
FULL_SCOPE_ENV = "GMAIL_REQUEST_DANGEROUS_FULL_AUTH_SCOPE"

CREDENTIALS_FILENAME = "credentials.json"
TOKEN_FILENAME = "token.json"


def resolve_config_dir(override: Optional[str] = None) -> Path:
    """
    Resolve the directory holding credentials.json and token.json.
    A CLI value wins over ENV; relative paths are resolved against the CWD.
    """
    value = override or os.getenv(CONFIG_DIR_ENV)
    if not value:
        raise ConfigError(
            f"argument 'config-dir' is required (if not using environment variable {CONFIG_DIR_ENV})"
        )
    return Path(value).expanduser().resolve()


def default_log_level() -> str:
    return os.getenv(LOG_LEVEL_ENV, "INFO")


def wants_full_scope() -> bool:
    return os.getenv(FULL_SCOPE_ENV) == "true"
