from pathlib import Path
from dotenv import dotenv_values
from pydantic import Field
from pydantic_settings import BaseSettings

import os

# Explicitly load .env for local/dev environments only if values are missing from the environment
BASE_DIR = Path(__file__).resolve().parent.parent.parent
env_file = BASE_DIR / ".env"

if env_file.exists():
    file_env = dotenv_values(env_file)
    missing_keys = {k: v for k, v in file_env.items() if k not in os.environ and v is not None}
    for k, v in missing_keys.items():
        os.environ[k] = v


class Settings(BaseSettings):
    """Application settings pulled from environment variables."""

    # Grid Configuration
    grid_resolution: float = Field(default=10.0, gt=0, description="Grid cell size in planar units")

    # Extrusion Configuration
    default_building_height: float = Field(default=10.0, gt=0, description="Height used when none is given")
    skip_degenerate_edges: bool = Field(
        default=False, description="Skip zero-length wall edges instead of raising"
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Logging format (e.g., console, json)")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "NOLLI_"
        extra = "ignore"


# Instantiate singleton settings object
settings = Settings()
