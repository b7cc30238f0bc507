"""Error handling utilities for vglink."""

import sys
import traceback
from typing import Optional

import click


class VGLinkError(Exception):
    """Base exception for vglink errors."""

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        suggestions: Optional[list] = None,
    ):
        self.message = message
        self.details = details
        self.suggestions = suggestions or []
        super().__init__(message)


class ConfigurationError(VGLinkError):
    """Raised when configuration is invalid or missing."""

    pass


class PolicyError(ConfigurationError):
    """Raised when the policy tree is incomplete or cannot be resolved."""

    pass


class PlatformError(VGLinkError):
    """Raised when a GitLab API call fails."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[str] = None,
        suggestions: Optional[list] = None,
    ):
        self.status_code = status_code
        super().__init__(message, details=details, suggestions=suggestions)


class SecretIssueError(VGLinkError):
    """Raised when Vault refuses or fails to issue a token."""

    pass


class ErrorHandler:
    """Handles and formats errors for user-friendly display."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    def handle_error(self, error: Exception, context: Optional[str] = None) -> None:
        """
        Handle and display error with appropriate formatting.

        Args:
            error: Exception to handle
            context: Optional context about when/where error occurred
        """
        if isinstance(error, VGLinkError):
            self._handle_vglink_error(error, context)
        else:
            self._handle_generic_error(error, context)

    def _handle_vglink_error(self, error: VGLinkError, context: Optional[str]) -> None:
        """Handle vglink-specific errors."""
        click.echo(f"✗ {error.message}", err=True)

        if context:
            click.echo(f"Context: {context}", err=True)

        if error.details:
            click.echo(f"Details: {error.details}", err=True)

        if error.suggestions:
            click.echo("\nSuggestions:", err=True)
            for suggestion in error.suggestions:
                click.echo(f"  • {suggestion}", err=True)

        if self.verbose:
            click.echo("\nFull traceback:", err=True)
            traceback.print_exc()

    def _handle_generic_error(self, error: Exception, context: Optional[str]) -> None:
        """Handle generic Python exceptions."""
        error_type = type(error).__name__

        if isinstance(error, FileNotFoundError):
            message = f"File not found: {error}"
            suggestions = [
                "Check that the file path is correct",
                "Ensure the file exists and is readable",
            ]
        elif isinstance(error, PermissionError):
            message = f"Permission denied: {error}"
            suggestions = ["Check file/directory permissions"]
        elif isinstance(error, ConnectionError):
            message = f"Connection failed: {error}"
            suggestions = [
                "Check that GitLab and Vault are reachable",
                "Check proxy and firewall settings",
            ]
        else:
            message = f"{error_type}: {error}"
            suggestions = []

        click.echo(f"✗ {message}", err=True)

        if context:
            click.echo(f"Context: {context}", err=True)

        if suggestions:
            click.echo("\nSuggestions:", err=True)
            for suggestion in suggestions:
                click.echo(f"  • {suggestion}", err=True)

        if self.verbose:
            click.echo("\nFull traceback:", err=True)
            traceback.print_exc()

    def exit_with_error(self, error: Exception, context: Optional[str] = None, exit_code: int = 1) -> None:
        """Handle error and exit with specified code."""
        self.handle_error(error, context)
        sys.exit(exit_code)


def create_error_suggestions(error_type: str, **kwargs) -> list:
    """
    Create contextual error suggestions based on error type and context.

    Args:
        error_type: Type of error
        **kwargs: Additional context information

    Returns:
        list: List of suggestion strings
    """
    suggestions = {
        "configuration_invalid": [
            "Check YAML syntax in the policy file",
            "Verify buildKey, enabled, renewPeriod and tokenSpec are set in the default section",
            "Durations look like 90s, 30m, 1h or 1h30m",
        ],
        "configuration_missing": [
            "Pass --config or set VGL_CONFIG_PATH",
            "Run 'vglink init' to write a starter policy file",
        ],
        "gitlab_unauthorized": [
            "Check that GITLAB_TOKEN is set and has the api scope",
            "Verify GITLAB_BASE_URL points at the /api/v4 endpoint",
        ],
        "vault_unauthorized": [
            "Check that VAULT_TOKEN is set and may create child tokens",
            "Verify VAULT_ADDR and VAULT_NAMESPACE",
        ],
    }

    return suggestions.get(error_type, [])


def format_validation_errors(errors: list) -> str:
    """
    Format validation errors for display.

    Args:
        errors: List of validation error messages

    Returns:
        str: Formatted error message
    """
    if not errors:
        return "No validation errors"

    if len(errors) == 1:
        return f"Validation error: {errors[0]}"

    formatted = "Validation errors:\n"
    for i, error in enumerate(errors, 1):
        formatted += f"  {i}. {error}\n"

    return formatted.strip()
