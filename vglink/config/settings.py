"""Process settings read from the environment."""

import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Mapping, Optional

from ..policy.duration import parse_positive_duration
from ..utils.errors import ConfigurationError, create_error_suggestions

DEFAULT_GITLAB_BASE_URL = "https://gitlab.com/api/v4"
DEFAULT_VAULT_ADDR = "https://127.0.0.1:8200"
DEFAULT_DISCOVERY_INTERVAL = "5m"
DEFAULT_REQUEST_TIMEOUT = 30.0

_TRUE_VALUES = {"1", "true", "t", "yes", "y", "on"}


@dataclass
class Settings:
    """Connection parameters for GitLab and Vault plus daemon timing."""

    config_path: Optional[str] = None
    gitlab_base_url: str = DEFAULT_GITLAB_BASE_URL
    gitlab_token: Optional[str] = None
    vault_addr: str = DEFAULT_VAULT_ADDR
    vault_token: Optional[str] = None
    vault_namespace: Optional[str] = None
    vault_skip_verify: bool = False
    discovery_interval: timedelta = timedelta(minutes=5)
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read from (defaults to ``os.environ``)

        Returns:
            Settings: Parsed settings

        Raises:
            ConfigurationError: If a value cannot be parsed
        """
        env = os.environ if environ is None else environ

        interval_text = env.get("VGL_DISCOVERY_INTERVAL") or DEFAULT_DISCOVERY_INTERVAL
        try:
            discovery_interval = parse_positive_duration(interval_text)
        except ValueError as e:
            raise ConfigurationError(f"Invalid VGL_DISCOVERY_INTERVAL: {interval_text!r}", details=str(e)) from e

        timeout_text = env.get("VGL_REQUEST_TIMEOUT")
        try:
            request_timeout = float(timeout_text) if timeout_text else DEFAULT_REQUEST_TIMEOUT
        except ValueError as e:
            raise ConfigurationError(f"Invalid VGL_REQUEST_TIMEOUT: {timeout_text!r}") from e

        return cls(
            config_path=env.get("VGL_CONFIG_PATH") or None,
            gitlab_base_url=(env.get("GITLAB_BASE_URL") or DEFAULT_GITLAB_BASE_URL).rstrip("/"),
            gitlab_token=env.get("GITLAB_TOKEN") or None,
            vault_addr=(env.get("VAULT_ADDR") or DEFAULT_VAULT_ADDR).rstrip("/"),
            vault_token=env.get("VAULT_TOKEN") or None,
            vault_namespace=env.get("VAULT_NAMESPACE") or None,
            vault_skip_verify=(env.get("VAULT_SKIP_VERIFY") or "").strip().lower() in _TRUE_VALUES,
            discovery_interval=discovery_interval,
            request_timeout=request_timeout,
        )

    def require_credentials(self) -> None:
        """
        Check that both service tokens are present.

        Raises:
            ConfigurationError: If GITLAB_TOKEN or VAULT_TOKEN is missing
        """
        if not self.gitlab_token:
            raise ConfigurationError(
                "GITLAB_TOKEN is not set",
                suggestions=create_error_suggestions("gitlab_unauthorized"),
            )
        if not self.vault_token:
            raise ConfigurationError(
                "VAULT_TOKEN is not set",
                suggestions=create_error_suggestions("vault_unauthorized"),
            )
