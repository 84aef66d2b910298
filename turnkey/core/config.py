"""
Loader Configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Loader settings"""

    # Logical library names
    ENGINE_LIBRARY: str = "z3"
    SHIM_LIBRARY: str = "z3java"

    # Resources
    RESOURCE_PACKAGE: str = "turnkey"
    RESOURCE_DIR: Optional[str] = None

    # Extraction
    TEMP_DIR_PREFIX: str = "turnkey-"
    COPY_CHUNK_SIZE: int = Field(default=1 << 13, gt=0)

    # Diagnostics
    LOG_LEVEL: str = "INFO"

    class Config:
        env_prefix = "TURNKEY_"
        extra = "ignore"


settings = Settings()
