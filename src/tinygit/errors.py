"""Error formatting utilities for tinygit.

Provides clean, user-friendly error messages from Pydantic validation errors
and other exceptions.
"""

from pydantic import ValidationError

from tinygit import cli_logger, exit_codes


def format_validation_errors(error: ValidationError) -> str:
    """Format Pydantic ValidationError into clean, user-friendly message.

    Removes Pydantic-specific URLs and technical jargon, producing a message
    suitable for CLI output.

    Args:
        error: The Pydantic ValidationError to format.

    Returns:
        A clean, human-readable error message.
    """
    messages = []

    for err in error.errors():
        loc = ".".join(str(part) for part in err["loc"])
        error_type = err["type"]

        if error_type == "missing":
            messages.append(f"'{loc}': field is required")
        elif error_type == "string_type":
            messages.append(f"'{loc}': expected string")
        elif error_type in ("int_type", "int_parsing"):
            messages.append(f"'{loc}': expected integer")
        elif error_type in ("bool_type", "bool_parsing"):
            messages.append(f"'{loc}': expected boolean")
        elif error_type == "extra_forbidden":
            messages.append(f"'{loc}': unknown setting")
        else:
            messages.append(f"'{loc}': {err['msg'].lower()}")

    if len(messages) == 1:
        return messages[0]

    return "; ".join(messages)


def handle_cli_error(error: Exception) -> int:
    """Handle an unhandled exception at the CLI boundary.

    Formats the error into a clean user-friendly message and returns
    an appropriate exit code. This prevents raw tracebacks from reaching
    the user.

    Args:
        error: The exception to handle.

    Returns:
        An exit code from exit_codes.
    """
    if isinstance(error, OSError):
        if error.filename:
            cli_logger.error(f"{error.strerror}: {error.filename}")
        else:
            cli_logger.error(str(error))
        return exit_codes.GENERAL_ERROR

    cli_logger.error(f"Unexpected error: {error}")
    return exit_codes.GENERAL_ERROR
