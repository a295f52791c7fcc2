"""Output reporters for rendering scan reports.

This module provides reporters for rendering grouped project data to a
terminal, JSON or HTML.
"""

from syld.reporters.base import BaseReporter
from syld.reporters.html import HtmlReporter
from syld.reporters.json import JsonReporter
from syld.reporters.terminal import TerminalReporter

__all__ = ["BaseReporter", "HtmlReporter", "JsonReporter", "TerminalReporter", "get_reporter"]

_REPORTERS: dict[str, type[BaseReporter]] = {
    "terminal": TerminalReporter,
    "json": JsonReporter,
    "html": HtmlReporter,
}


def get_reporter(format_name: str) -> BaseReporter:
    """Get the reporter for an output format.

    Raises:
        ValueError: If the format is not supported.
    """
    try:
        return _REPORTERS[format_name]()
    except KeyError:
        raise ValueError(
            f"Unknown report format '{format_name}'. "
            f"Supported formats: {', '.join(_REPORTERS)}"
        ) from None
