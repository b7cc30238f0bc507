"""Tests for error handling system."""

from unittest.mock import patch

import click
from click.testing import CliRunner

from vglink.utils.errors import (
    ConfigurationError,
    ErrorHandler,
    PlatformError,
    PolicyError,
    SecretIssueError,
    VGLinkError,
    create_error_suggestions,
    format_validation_errors,
)


class TestVGLinkError:
    """Test custom error classes."""

    def test_vglink_error_basic(self):
        """Test basic VGLinkError functionality."""
        error = VGLinkError("Test error message")

        assert str(error) == "Test error message"
        assert error.message == "Test error message"
        assert error.details is None
        assert error.suggestions == []

    def test_vglink_error_with_details(self):
        """Test VGLinkError with details and suggestions."""
        suggestions = ["Try this", "Or try that"]
        error = VGLinkError("Test error", details="Detailed explanation", suggestions=suggestions)

        assert error.message == "Test error"
        assert error.details == "Detailed explanation"
        assert error.suggestions == suggestions

    def test_specific_error_types(self):
        """Test specific error type inheritance."""
        assert isinstance(ConfigurationError("Config error"), VGLinkError)
        assert isinstance(PolicyError("Policy error"), ConfigurationError)
        assert isinstance(SecretIssueError("Vault error"), VGLinkError)
        assert isinstance(PlatformError("GitLab error"), VGLinkError)

    def test_platform_error_status_code(self):
        error = PlatformError("GitLab returned 404", status_code=404, details="not found")

        assert error.status_code == 404
        assert error.details == "not found"


class TestErrorHandler:
    """Test error handler functionality."""

    def setup_method(self):
        """Setup test environment."""
        self.handler = ErrorHandler(verbose=False)
        self.verbose_handler = ErrorHandler(verbose=True)

    def test_handle_vglink_error(self):
        """Test handling vglink-specific errors."""
        error = VGLinkError(
            "Test error message",
            details="Error details",
            suggestions=["Suggestion 1", "Suggestion 2"],
        )

        with patch("click.echo") as mock_echo:
            self.handler.handle_error(error, "Test context")

            # Error, context, details, suggestions header and two suggestions
            assert mock_echo.call_count >= 4

            error_calls = [call for call in mock_echo.call_args_list if "✗" in str(call)]
            assert len(error_calls) > 0

    def test_handle_generic_error_file_not_found(self):
        """Test handling FileNotFoundError."""
        error = FileNotFoundError("vglink.yml not found")

        with patch("click.echo") as mock_echo:
            self.handler.handle_error(error)

            assert mock_echo.called
            error_message = str(mock_echo.call_args_list[0])
            assert "File not found" in error_message

    def test_handle_generic_error_connection(self):
        """Test handling ConnectionError."""
        error = ConnectionError("connection refused")

        with patch("click.echo") as mock_echo:
            self.handler.handle_error(error)

            error_message = str(mock_echo.call_args_list[0])
            assert "Connection failed" in error_message

    def test_handle_error_with_verbose(self):
        """Test error handling with verbose output."""
        error = VGLinkError("Test error")

        with patch("click.echo"):
            with patch("traceback.print_exc") as mock_traceback:
                self.verbose_handler.handle_error(error)

                mock_traceback.assert_called_once()

    def test_exit_with_error(self):
        """Test exit_with_error functionality."""
        error = VGLinkError("Fatal error")

        with patch("click.echo"):
            with patch("sys.exit") as mock_exit:
                self.handler.exit_with_error(error, exit_code=2)

                mock_exit.assert_called_once_with(2)


class TestErrorUtilities:
    """Test error utility functions."""

    def test_create_error_suggestions_configuration(self):
        suggestions = create_error_suggestions("configuration_invalid")

        assert any("renewPeriod" in suggestion for suggestion in suggestions)

    def test_create_error_suggestions_gitlab(self):
        suggestions = create_error_suggestions("gitlab_unauthorized")

        assert any("GITLAB_TOKEN" in suggestion for suggestion in suggestions)

    def test_create_error_suggestions_unknown(self):
        """Test suggestions for unknown error type."""
        assert create_error_suggestions("unknown_error_type") == []

    def test_format_validation_errors_single(self):
        """Test formatting single validation error."""
        result = format_validation_errors(["default: 'repositorySpec' is a required property"])

        assert result.startswith("Validation error:")
        assert "repositorySpec" in result

    def test_format_validation_errors_multiple(self):
        """Test formatting multiple validation errors."""
        errors = [
            "default: 'tokenSpec' is a required property",
            "groups.infra.default.repositorySpec.renewPeriod: invalid duration: 'soon'",
        ]

        result = format_validation_errors(errors)

        assert "Validation errors:" in result
        assert "1." in result
        assert "2." in result

    def test_format_validation_errors_empty(self):
        """Test formatting empty validation errors."""
        assert format_validation_errors([]) == "No validation errors"


class TestClickIntegration:
    """Test error handling integration with Click commands."""

    def test_cli_error_handling(self):
        """Test error handling in Click command context."""

        @click.command()
        def test_command():
            ErrorHandler().exit_with_error(ConfigurationError("Test config error"))

        runner = CliRunner()
        result = runner.invoke(test_command)

        assert result.exit_code == 1
        assert "Test config error" in result.output
