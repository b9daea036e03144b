"""Error formatting utilities.

Renders DatastoreError instances for CLI and log display, pulling the
title and remediation from the error registry.
"""

from src.errors.domain import DatastoreError
from src.errors.registry import get_error


def format_error(error: DatastoreError, include_remediation: bool = True) -> str:
    """Format error for display to user.

    Args:
        error: The DatastoreError to format.
        include_remediation: Whether to include remediation steps.

    Returns:
        Multi-line formatted string suitable for user display.
    """
    error_def = get_error(error.code)
    title = error_def.title if error_def else error.kind.value
    lines = [f"{error.code}: {title}", f"  {error.message}"]

    for key in ("tool_name", "call_id", "url"):
        value = error.details.get(key)
        if value:
            lines.append(f"  {key.replace('_', ' ').capitalize()}: {value}")

    if include_remediation and error.remediation:
        lines.append(f"  Action: {error.remediation}")

    return "\n".join(lines)


def format_error_summary(errors: list[DatastoreError]) -> str:
    """Format a list of errors for display.

    Args:
        errors: List of DatastoreError objects.

    Returns:
        User-friendly summary.
    """
    if not errors:
        return "No errors."

    if len(errors) == 1:
        return format_error(errors[0])

    lines = [f"{len(errors)} error(s) found:\n"]
    for i, error in enumerate(errors, 1):
        lines.append(f"{i}. {format_error(error)}")
        lines.append("")

    return "\n".join(lines)
