"""Configuration management for the autoclave integration."""

import logging
import os
from pathlib import Path
from dotenv import load_dotenv

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent

# Load environment variables from .env file
env_path = PROJECT_ROOT / ".env"
if env_path.exists():
    load_dotenv(env_path)
else:
    # Fall back to template for defaults
    template_path = PROJECT_ROOT / ".env.template"
    if template_path.exists():
        load_dotenv(template_path)


class Config:
    """Application configuration.

    Device address and serial number are never configured here; the
    embedding application passes them per call.
    """

    # HTTP settings
    DEFAULT_PORT: int = int(os.getenv("AUTOCLAVE_DEFAULT_PORT", "80"))
    TIMEOUT_SECONDS: float = float(os.getenv("AUTOCLAVE_TIMEOUT_SECONDS", "5"))
    LONG_TIMEOUT_SECONDS: float = float(
        os.getenv("AUTOCLAVE_LONG_TIMEOUT_SECONDS", str(TIMEOUT_SECONDS * 2))
    )

    # On-device filesystem
    SCILOG_BASE_PATH: str = "/opt/data/scilog"

    # Duration estimation
    SAMPLE_INTERVAL_SECONDS: int = 5
    DEFAULT_CYCLE_DURATION_MINUTES: int = 30

    UNKNOWN_MODEL: str = "Unknown Autoclave"

    # Logging
    LOG_LEVEL: str = os.getenv("AUTOCLAVE_LOG_LEVEL", "INFO")

    @classmethod
    def get_log_level(cls) -> int:
        """Resolve LOG_LEVEL to a logging level, defaulting to INFO."""
        level = logging.getLevelName(cls.LOG_LEVEL.upper())
        return level if isinstance(level, int) else logging.INFO


# Endpoint paths on the device web interface
CYCLES_INDEX_PATH = "/data/cycles.cgi"
ARCHIVES_PAGE_PATH = "/us/archives.php"
FILE_READER_PATH = "/data/file_reader.php"
CYCLE_DATA_PATH = "/data/cycleData.php"

# Older MQX firmware answers POSTs on .cgi endpoints instead
MQX_CYCLE_DATA_PATH = "/data/cycleData.cgi"


config = Config()
