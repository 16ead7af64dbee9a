# -*- coding: utf-8 -*-
# Time       : 2024/10/12 14:31
# Author     : QIN2DIM
# GitHub     : https://github.com/QIN2DIM
# Description:
import os
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BrowserType = Literal["chromium", "firefox"]


class AgentConfig(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_ignore_empty=True, extra="ignore")

    TWOCAPTCHA_KEY: SecretStr = Field(
        default_factory=lambda: os.environ.get("TWOCAPTCHA_KEY", ""),
        description="API key of https://2captcha.com",
        validate_default=True,
    )
    TWOCAPTCHA_BASE_URL: str = Field(default="https://2captcha.com")

    BROWSER: BrowserType = Field(default="chromium", description="chromium or firefox")
    BROWSER_HEADLESS: bool = Field(default=True)
    BROWSER_DISABLE_GPU: bool = Field(
        default=False, description="Use software rendering, for hosts without a GPU"
    )
    BROWSER_GHOST_CURSOR: bool = Field(
        default=False, description="Move the pointer along humanized paths instead of teleporting"
    )
    BROWSER_LOCALE: str | None = Field(default=None, description="e.g. en-US")

    SOLVE_ATTEMPTS: int = Field(default=3, ge=1)
    SOLVE_RETRY_WAIT: float = Field(default=0, ge=0, description="[unit: second]")
    SOLVE_TIMEOUT: float = Field(
        default=120,
        description="How long to poll the solving service for one task [unit: second]",
    )
    POLLING_INTERVAL: float = Field(default=5, gt=0, description="[unit: second]")

    NETWORK_IDLE_MS: int = Field(
        default=500,
        description="The page counts as settled after this long without in-flight requests [unit: millisecond]",
    )
    NETWORK_IDLE_TIMEOUT: float = Field(
        default=30,
        description="When your local network is poor, increase this value appropriately [unit: second]",
    )
    SCREENSHOT_TIMEOUT_MS: int = Field(default=5000)
    BOOTSTRAP_TIMEOUT_MS: int = Field(
        default=60000,
        description="When your local network is poor, increase this value appropriately [unit: millisecond]",
    )

    DRAG_HOLD_SECONDS: float = Field(
        default=1.1, description="Dwell between mouse down and the drag movement [unit: second]"
    )
    DRAG_STEPS: int = Field(default=30, ge=1)

    drag_instructions_image: Path = Path("public/drag-instructions.jpg")

    @field_validator("TWOCAPTCHA_KEY", mode="before")
    @classmethod
    def validate_api_key(cls, v: Any) -> str:
        if isinstance(v, SecretStr):
            v = v.get_secret_value()
        if not v or not isinstance(v, str):
            raise ValueError(
                "TWOCAPTCHA_KEY is required but not provided. "
                "Please either pass it directly or set the TWOCAPTCHA_KEY environment variable."
            )
        return v

    @field_validator("BROWSER", mode="before")
    @classmethod
    def normalize_browser(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip().lower()
            return v if v == "firefox" else "chromium"
        return v
