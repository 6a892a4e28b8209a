"""Tests for error formatting utilities."""

from unittest.mock import patch

import pytest
from pydantic import ValidationError

from tinygit import cli_logger, exit_codes
from tinygit.config import Settings
from tinygit.errors import format_validation_errors, handle_cli_error
from tinygit.pipeline import DownloadOptions


def _validation_error(model: type, data: dict) -> ValidationError:
    try:
        model.model_validate(data)
    except ValidationError as e:
        return e
    pytest.fail("Expected ValidationError")


class TestFormatValidationErrors:
    """Tests for format_validation_errors function."""

    def test_missing_field(self) -> None:
        """Verify a missing field produces a clean message."""
        # Given
        error = _validation_error(DownloadOptions, {})

        # When
        result = format_validation_errors(error)

        # Then
        assert result == "'url': field is required"
        assert "pydantic.dev" not in result

    def test_unknown_setting(self) -> None:
        """Verify extra keys in settings are reported as unknown."""
        # Given
        error = _validation_error(Settings, {"mirror": "x"})

        # When
        result = format_validation_errors(error)

        # Then
        assert result == "'mirror': unknown setting"

    def test_wrong_types_are_joined(self) -> None:
        """Verify several problems are listed together."""
        # Given
        error = _validation_error(
            Settings, {"timeout_seconds": "soon", "codeberg_prefer_tar_gz": "maybe"}
        )

        # When
        result = format_validation_errors(error)

        # Then
        assert "'timeout_seconds': expected integer" in result
        assert "'codeberg_prefer_tar_gz': expected boolean" in result
        assert "; " in result

    def test_custom_validator_message_is_kept(self) -> None:
        """Verify messages from field validators pass through lower-cased."""
        # Given
        error = _validation_error(Settings, {"default_branch": "two words"})

        # When
        result = format_validation_errors(error)

        # Then
        assert result.startswith("'default_branch': value error")
        assert "whitespace" in result
        assert "For further information" not in result


class TestHandleCliError:
    """Tests for handle_cli_error function."""

    def test_handles_permission_error(self) -> None:
        """Verify PermissionError produces clean message and GENERAL_ERROR."""
        # Given
        filename = "/srv/out/acme-widget-main.zip"
        error = PermissionError(13, "Permission denied", filename)

        # When
        with patch.object(cli_logger, "error") as mock_error:
            exit_code = handle_cli_error(error)

        # Then
        assert exit_code == exit_codes.GENERAL_ERROR
        mock_error.assert_called_once()
        call_message = mock_error.call_args[0][0]
        assert "Permission denied" in call_message
        assert filename in call_message

    def test_handles_os_error_without_filename(self) -> None:
        """Verify OSError without filename still produces clean message."""
        # Given
        error = OSError("Disk full")

        # When
        with patch.object(cli_logger, "error") as mock_error:
            exit_code = handle_cli_error(error)

        # Then
        assert exit_code == exit_codes.GENERAL_ERROR
        assert "Disk full" in mock_error.call_args[0][0]

    def test_handles_generic_exception(self) -> None:
        """Verify generic Exception produces GENERAL_ERROR."""
        # Given
        error = RuntimeError("Something went wrong")

        # When
        with patch.object(cli_logger, "error") as mock_error:
            exit_code = handle_cli_error(error)

        # Then
        assert exit_code == exit_codes.GENERAL_ERROR
        assert "Something went wrong" in mock_error.call_args[0][0]
