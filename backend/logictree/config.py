"""Configuration settings loaded from environment variables."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field


load_dotenv()


class Settings(BaseModel):
    """logictree settings loaded from environment variables."""

    log_level: str = Field(default="WARNING", description="Logging level")

    # Template engine
    template_name: str = Field(
        default="tree",
        description="Name given to compiled templates, used in error messages",
    )
    missing_key: Literal["default", "error"] = Field(
        default="default",
        description="What to do when a field is missing from the context: "
        "render '<no value>' (default) or raise (error)",
    )

    model_config = {"extra": "ignore"}


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance loaded from environment."""
    return Settings(
        log_level=os.getenv("LOGICTREE_LOG_LEVEL", "WARNING"),
        template_name=os.getenv("LOGICTREE_TEMPLATE_NAME", "tree"),
        missing_key=os.getenv("LOGICTREE_MISSING_KEY", "default"),  # type: ignore[arg-type]
    )
