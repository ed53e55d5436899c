"""CLI output styling utilities.

Consistent styling for operator-facing output:
- Cyan bold for labels
- Green for success messages (with checkmark)
- Red for error messages (with cross)
- Yellow for warnings
"""

from __future__ import annotations

__all__ = [
    "style_error",
    "style_label",
    "style_success",
    "style_warning",
]

import click


def style_label(label: str) -> str:
    """Style a label for a value that follows it.

    Example:
        >>> click.echo(style_label("Fingerprint") + f" {fingerprint}")
        Fingerprint: AB:CD:...
    """
    return click.style(f"{label}:", fg="cyan", bold=True)


def style_success(message: str) -> str:
    """Style a success message with checkmark.

    Example:
        >>> click.echo(style_success("Written cert.pem"))
        ✓ Written cert.pem
    """
    return click.style(f"✓ {message}", fg="green")


def style_error(message: str) -> str:
    """Style an error message with cross mark.

    Example:
        >>> click.echo(style_error("Failed to open configuration file"), err=True)
        ✗ Failed to open configuration file
    """
    return click.style(f"✗ {message}", fg="red")


def style_warning(message: str) -> str:
    """Style a warning message with yellow color.

    Example:
        >>> click.echo(style_warning("For testing purposes only"))
        Warning: For testing purposes only
    """
    return click.style(f"Warning: {message}", fg="yellow", bold=True)
