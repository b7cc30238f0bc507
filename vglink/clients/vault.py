"""Vault client that mints child tokens."""

import logging
from typing import Any, Dict, Optional

import requests

from ..utils.errors import SecretIssueError, create_error_suggestions

logger = logging.getLogger(__name__)


class VaultTokenIssuer:
    """Issues Vault tokens through ``auth/token/create``."""

    def __init__(
        self,
        address: str,
        token: str,
        namespace: Optional[str] = None,
        verify: bool = True,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the issuer.

        Args:
            address: Vault address, e.g. https://vault.example.com:8200
            token: Token allowed to create child tokens
            namespace: Optional Vault Enterprise namespace
            verify: Verify the server TLS certificate
            timeout: Per-request timeout in seconds
            session: Optional pre-configured requests session
        """
        self.address = address.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.verify = verify
        self.session.headers.update({"X-Vault-Token": token})
        if namespace:
            self.session.headers.update({"X-Vault-Namespace": namespace})

    def issue(self, token_spec: Optional[Dict[str, Any]]) -> str:
        """
        Create a token from a token-create request.

        Args:
            token_spec: Request body (policies, ttl, renewable, ...), sent unchanged

        Returns:
            str: The new client token

        Raises:
            SecretIssueError: If Vault cannot be reached or refuses the request
        """
        url = f"{self.address}/v1/auth/token/create"
        try:
            response = self.session.post(url, json=token_spec or {}, timeout=self.timeout)
        except requests.RequestException as e:
            raise SecretIssueError("Vault request failed", details=str(e)) from e

        if response.status_code >= 400:
            suggestions = []
            if response.status_code in (401, 403):
                suggestions = create_error_suggestions("vault_unauthorized")
            raise SecretIssueError(
                f"Vault returned {response.status_code} for token creation",
                details=response.text[:500],
                suggestions=suggestions,
            )

        try:
            client_token = response.json()["auth"]["client_token"]
        except (ValueError, KeyError, TypeError) as e:
            raise SecretIssueError("Vault response did not contain a client token") from e

        if not client_token:
            raise SecretIssueError("Vault returned an empty client token")

        logger.debug("Issued Vault token")
        return client_token
