"""Client configuration"""

import os
import typing as t
from importlib.metadata import PackageNotFoundError, version

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

PACKAGE_NAME = "taskrelay"
DEFAULT_BASE_URL = "https://browser.ai"

API_TOKEN_ENV_VAR = "BROWSER_AI_API_TOKEN"
BASE_URL_ENV_VAR = "BROWSER_AI_BASE_URL"
PROJECT_ENV_VAR = "BROWSER_AI_PROJECT"
POLL_INTERVAL_ENV_VAR = "BROWSER_AI_POLL_INTERVAL"


def get_package_identity() -> tuple[str, str]:
    try:
        return PACKAGE_NAME, version(PACKAGE_NAME)
    except PackageNotFoundError:
        return PACKAGE_NAME, "0.0.0"


def get_default_api_token() -> str:
    api_token = os.getenv(API_TOKEN_ENV_VAR)
    if not api_token:
        raise ValueError(
            f"API token not found. Either set {API_TOKEN_ENV_VAR} in the environment variables or provide it through the api_token parameter."
        )
    return api_token


class ClientSettings(BaseModel):
    api_token: str
    base_url: str = DEFAULT_BASE_URL
    project_name: str = "default"
    poll_interval_seconds: float = 3.0
    submit_delay_seconds: float = 1.0
    request_timeout_seconds: float = 30.0

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        stripped = value.strip().rstrip("/")
        if not stripped:
            raise ValueError("Base URL cannot be empty")
        return stripped

    @classmethod
    def from_env(cls, **overrides: t.Any) -> "ClientSettings":
        """Build settings from environment variables (and a ``.env`` file)

        Args:
            **overrides: Explicit values that take precedence over the environment.
                ``None`` values are ignored.

        Returns:
            ClientSettings: The resolved settings
        """
        load_dotenv(override=False)
        values: dict[str, t.Any] = {}
        if base_url := os.getenv(BASE_URL_ENV_VAR):
            values["base_url"] = base_url
        if project_name := os.getenv(PROJECT_ENV_VAR):
            values["project_name"] = project_name
        if poll_interval := os.getenv(POLL_INTERVAL_ENV_VAR):
            values["poll_interval_seconds"] = poll_interval
        values.update({key: value for key, value in overrides.items() if value is not None})
        if "api_token" not in values:
            values["api_token"] = get_default_api_token()
        return cls(**values)
