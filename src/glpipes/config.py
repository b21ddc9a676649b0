"""glpipes configuration.

Settings come from the environment only; nothing is read from or written to
disk.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional


# Default configuration values
DEFAULT_GITLAB_URL = "https://gitlab.com"
DEFAULT_TIMEOUT = 30.0
API_PATH = "/api/v4"

TOKEN_ENV = "GITLAB_PERSONAL_TOKEN"
URL_ENV = "GITLAB_URL"
LOG_FILE_ENV = "GLPIPES_LOG_FILE"


class ConfigError(Exception):
    """Raised when required settings are missing."""


@dataclass
class Settings:
    """Connection settings for the GitLab instance."""

    token: str
    url: str = DEFAULT_GITLAB_URL
    timeout: float = DEFAULT_TIMEOUT

    @property
    def api_url(self) -> str:
        """Base URL of the REST API, e.g. https://gitlab.com/api/v4."""
        return self.url.rstrip("/") + API_PATH

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Load settings from environment variables.

        Raises:
            ConfigError: If GITLAB_PERSONAL_TOKEN is unset or empty.
        """
        if environ is None:
            environ = os.environ

        token = environ.get(TOKEN_ENV, "")
        if not token:
            raise ConfigError(f"Please set {TOKEN_ENV} environment variable.")

        url = environ.get(URL_ENV, "") or DEFAULT_GITLAB_URL
        return cls(token=token, url=url)
