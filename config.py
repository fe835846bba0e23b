import os
from functools import lru_cache
from typing import List

from pydantic import BaseModel, Field

# Default log folder sits next to the application modules
DEFAULT_LOG_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "logs")


def _split_env_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings(BaseModel):
    """
    Runtime settings for the Excel Mapper API.

    Attributes:
        log_dir: Folder receiving the daily log file
        log_level: Name of the root logging level
        allowed_extensions: File name suffixes accepted for upload
        cors_origins: Origins allowed by the CORS middleware
    """
    log_dir: str = DEFAULT_LOG_DIR
    log_level: str = "INFO"
    allowed_extensions: List[str] = Field(default_factory=lambda: [".xlsx", ".xls"])
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])


@lru_cache()
def get_settings() -> Settings:
    """
    Build the settings from EXCEL_MAPPER_* environment variables.

    Returns:
        Settings: Cached settings instance
    """
    return Settings(
        log_dir=os.getenv("EXCEL_MAPPER_LOG_DIR", DEFAULT_LOG_DIR),
        log_level=os.getenv("EXCEL_MAPPER_LOG_LEVEL", "INFO").upper(),
        allowed_extensions=[
            ext.lower() for ext in _split_env_list("EXCEL_MAPPER_ALLOWED_EXTENSIONS", ".xlsx,.xls")
        ],
        cors_origins=_split_env_list("EXCEL_MAPPER_CORS_ORIGINS", "*"),
    )
