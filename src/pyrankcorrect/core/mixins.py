"""Mixin classes for result dataclasses.

This module provides common formatting utilities for result summaries.
"""

from __future__ import annotations

from typing import Any


class ResultSummaryMixin:
    """Common formatting utilities for result summaries.

    Provides helper methods for generating human-readable summary reports
    with consistent formatting across all result types.
    """

    @staticmethod
    def _format_header(title: str, width: int = 80) -> str:
        """Format a section header.

        Args:
            title: Header title text
            width: Total width of the header

        Returns:
            Formatted header string with border
        """
        border = "=" * width
        padding = (width - len(title)) // 2
        centered_title = " " * padding + title
        return f"{border}\n{centered_title}\n{border}"

    @staticmethod
    def _format_metric(label: str, value: Any, width: int = 40) -> str:
        """Format a metric label-value pair, right-aligned with dot leaders."""
        if isinstance(value, bool):
            formatted_value = "Yes" if value else "No"
        elif isinstance(value, float):
            if abs(value) < 0.0001 and value != 0:
                formatted_value = f"{value:.4e}"
            elif abs(value) >= 1000:
                formatted_value = f"{value:,.2f}"
            else:
                formatted_value = f"{value:.4f}"
        elif value is None:
            formatted_value = "N/A"
        else:
            formatted_value = str(value)

        dots = "." * max(1, width - len(label) - len(formatted_value) - 2)
        return f"  {label} {dots} {formatted_value}"

    @staticmethod
    def _format_interpretation(p_random: float) -> str:
        """Interpretation text for an estimated share of random respondents."""
        if p_random <= 0.0:
            return "No random responding detected - correction has no effect"
        elif p_random < 0.1:
            return "Low random responding - raw and corrected PMFs are close"
        elif p_random < 0.3:
            return "Moderate random responding - correction shifts the PMF noticeably"
        elif p_random < 1.0:
            return "High random responding - corrected PMF relies on few attentive answers"
        else:
            return "Anchor accuracy at or below chance - correction is degenerate"

    @staticmethod
    def _format_footer(computation_time_ms: float, width: int = 80) -> str:
        """Format the report footer with computation time."""
        border = "=" * width
        if computation_time_ms < 1000:
            time_str = f"{computation_time_ms:.2f} ms"
        else:
            time_str = f"{computation_time_ms / 1000:.2f} s"
        return f"\nComputation Time: {time_str}\n{border}"

    @staticmethod
    def _format_section(title: str) -> str:
        """Format a section subheader."""
        return f"\n{title}:\n{'-' * len(title)}"

    @staticmethod
    def _format_list(items: list, max_items: int = 5, item_name: str = "item") -> str:
        """Format a list with optional truncation.

        Args:
            items: List of items to format
            max_items: Maximum items to show before truncating
            item_name: Name for items (singular form)

        Returns:
            Formatted list string
        """
        if not items:
            return "  (none)"

        result = []
        for i, item in enumerate(items[:max_items]):
            result.append(f"  {i + 1}. {item}")

        if len(items) > max_items:
            remaining = len(items) - max_items
            result.append(f"  ... and {remaining} more {item_name}(s)")

        return "\n".join(result)
