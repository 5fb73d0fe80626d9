"""Output formatters for summary responses."""

from order_summary.formatters.console import format_summary_for_console

__all__ = ["format_summary_for_console"]
