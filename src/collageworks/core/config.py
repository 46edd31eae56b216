"""Configuration management for Collageworks.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the COLLAGEWORKS_
prefix, allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (COLLAGEWORKS_* prefix)
2. .env file in the project root
3. Default values defined in CollageworksConfig

Service credentials additionally accept their conventional unprefixed names,
so an existing ``REPLICATE_API_TOKEN`` or ``PEXELS_API_KEY`` works as-is.

Example .env file:
    REPLICATE_API_TOKEN=r8_...
    PEXELS_API_KEY=...
    OPENAI_API_KEY=sk-...
    COLLAGEWORKS_SECONDARY_MODEL=black-forest-labs/flux-kontext-max
    COLLAGEWORKS_POLL_INTERVAL=1.0

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.
Components accept an explicit config so tests can build their own.

Usage Example
-------------
    from collageworks.core.config import config

    print(config.primary_model)
    print(config.canvas_width, config.canvas_height)

Polling
-------
``poll_interval`` is the fixed delay between prediction status checks. There
is no backoff, no attempt cap and no overall timeout: a stalled prediction
keeps the caller waiting.
"""

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CollageworksConfig(BaseSettings):
    """Main configuration for Collageworks.

    Attributes
    ----------
    Prediction Service:
        replicate_api_url : str
            Base URL of the predictions API
        replicate_api_token : str | None
            API token (also read from REPLICATE_API_TOKEN)
        primary_model : str
            Model reference used for single-job enhancement and as image1
        secondary_model : str
            Model reference used as image2 in comparison mode
        poll_interval : float
            Seconds between status checks
        safety_tolerance : int
            Fixed moderate safety tier sent with every job
        output_format : Literal["jpg", "png"]
            Output format requested from the model

    Vision Model:
        openai_api_key : str | None
            Key for the judge/suggestion model (also read from OPENAI_API_KEY)
        vision_model : str
            Multimodal chat model used for judgment and suggestions

    Stock Photos:
        pexels_api_url : str
        pexels_api_key : str | None
            Also read from PEXELS_API_KEY
        stock_results_limit : int
            Maximum number of photos returned per search (<= 12)

    Canvas:
        canvas_width : int
        canvas_height : int
        layer_max_size : int
            Bounding box new layers are fitted into

    Paths / servers:
        static_dir : Path
            Directory that site-relative image paths ("/foo.png") resolve against
        request_timeout : float
            Per-request HTTP timeout; does not bound polling
        server_host, server_port : FastAPI (uvicorn) bind address
        gradio_server_name, gradio_server_port, gradio_share : Gradio UI
        log_level : str

    Examples
    --------
        >>> custom = CollageworksConfig(poll_interval=0.0, _env_file=None)
        >>> custom.canvas_width
        800
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="COLLAGEWORKS_",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # Prediction service
    replicate_api_url: str = Field(
        default="https://api.replicate.com/v1",
        description="Base URL of the predictions API",
    )
    replicate_api_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "replicate_api_token",
            "COLLAGEWORKS_REPLICATE_API_TOKEN",
            "REPLICATE_API_TOKEN",
        ),
        description="Token for the predictions API",
    )
    primary_model: str = Field(
        default="black-forest-labs/flux-kontext-pro",
        description="Model used for enhancement, edits and as image1 in comparisons",
    )
    secondary_model: str = Field(
        default="black-forest-labs/flux-kontext-max",
        description="Model used as image2 in comparisons",
    )
    poll_interval: float = Field(
        default=1.0,
        ge=0.0,
        description="Seconds between prediction status checks",
    )
    safety_tolerance: int = Field(default=2, ge=0, le=6)
    output_format: Literal["jpg", "png"] = Field(default="jpg")

    # Vision model (judge + suggestions)
    openai_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "openai_api_key",
            "COLLAGEWORKS_OPENAI_API_KEY",
            "OPENAI_API_KEY",
        ),
    )
    vision_model: str = Field(
        default="gpt-4o",
        description="Multimodal chat model for comparisons and suggestions",
    )

    # Stock photo search
    pexels_api_url: str = Field(default="https://api.pexels.com/v1")
    pexels_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "pexels_api_key",
            "COLLAGEWORKS_PEXELS_API_KEY",
            "PEXELS_API_KEY",
        ),
    )
    stock_results_limit: int = Field(default=12, ge=1, le=12)

    # Canvas
    canvas_width: int = Field(default=800, ge=1)
    canvas_height: int = Field(default=600, ge=1)
    layer_max_size: int = Field(default=200, ge=1)

    # Paths and networking
    static_dir: Path = Field(
        default=Path("public"),
        description="Root for site-relative image paths",
    )
    request_timeout: float = Field(default=60.0, gt=0.0)

    # API server
    server_host: str = Field(default="0.0.0.0")
    server_port: int = Field(default=8000, ge=1024, le=65535)

    # UI settings
    gradio_server_name: str = Field(
        default="0.0.0.0",
        description="Server bind address (0.0.0.0 for local network)",
    )
    gradio_server_port: int = Field(default=7860, ge=1024, le=65535)
    gradio_share: bool = Field(
        default=False,
        description="Create public gradio.live link (keep False for local-only)",
    )

    log_level: str = Field(default="INFO")


# Global configuration instance
# Loaded from environment variables (COLLAGEWORKS_* prefix) and .env file.
config = CollageworksConfig()
