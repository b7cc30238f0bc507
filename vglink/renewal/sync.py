"""Issue one Vault token and store it in one GitLab CI/CD variable."""

import logging
from typing import Any, Dict, Optional

from ..utils.errors import PlatformError, SecretIssueError

logger = logging.getLogger(__name__)


def sync_secret(
    platform,
    issuer,
    repo_id: int,
    build_key: str,
    token_spec: Optional[Dict[str, Any]],
) -> bool:
    """
    Mint a token and write it to ``build_key`` on project ``repo_id``.

    The variable is updated in place and created when the update fails,
    which is what happens the first time a project is seen. Errors are
    logged, never raised: the previous token stays in place until the next
    attempt.

    Args:
        platform: GitLab client (``update_variable``/``create_variable``)
        issuer: Vault client (``issue``)
        repo_id: GitLab project id
        build_key: CI/CD variable name
        token_spec: Token-create request, forwarded unchanged

    Returns:
        bool: True if the variable now holds the new token
    """
    try:
        secret = issuer.issue(token_spec)
    except SecretIssueError as e:
        logger.error("Could not issue token for project %s: %s", repo_id, e.message)
        return False

    try:
        platform.update_variable(repo_id, build_key, secret)
    except PlatformError as update_error:
        logger.debug("Update of %s on project %s failed (%s), creating it", build_key, repo_id, update_error.message)
        try:
            platform.create_variable(repo_id, build_key, secret)
        except PlatformError as create_error:
            logger.error("Could not write %s for project %s: %s", build_key, repo_id, create_error.message)
            return False
        logger.info("%s created for project %s", build_key, repo_id)
        return True

    logger.info("%s updated for project %s", build_key, repo_id)
    return True
