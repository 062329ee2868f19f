"""Markdown preview of a mapping result for user confirmation."""

from typing import Optional

from ..config import settings
from .models import OperationResult


def _truncate(text: str, limit: int) -> str:
    return text[:limit] + "..." if len(text) > limit else text


def generate_preview(result: OperationResult, max_rows: Optional[int] = None) -> str:
    """
    Render statistics, diagnostics and the first few records as Markdown.

    Args:
        result: The mapping result to preview
        max_rows: Number of records to show (settings.preview_max_rows if None)

    Returns:
        Markdown text
    """
    if max_rows is None:
        max_rows = settings.preview_max_rows
    stats = result.stats

    lines = [
        "## Test Case Import Preview",
        "",
        "### Statistics:",
        f"- Total rows processed: {stats.total_rows}",
        f"- Valid test cases: {stats.valid_rows}",
        f"- Test cases with ID (will be updated): {stats.rows_with_id}",
        f"- Test cases without ID (will be created): {stats.rows_without_id}",
        "",
    ]

    if result.errors:
        lines.append(f"### ❌ Errors ({len(result.errors)}):")
        lines.extend(f"- {error}" for error in result.errors)
        lines.append("")

    if result.warnings:
        lines.append(f"### ⚠️ Warnings ({len(result.warnings)}):")
        lines.extend(f"- {warning}" for warning in result.warnings)
        lines.append("")

    shown = result.records[:max_rows]
    if shown:
        lines.append(f"### Sample Test Cases (showing first {len(shown)}):")
        lines.append("")
        for number, record in enumerate(shown, start=1):
            lines.append(f"**{number}. {record.title}**")
            if record.id is not None:
                lines.append(f"   - ID: {record.id} (will update existing)")
            if record.priority is not None:
                lines.append(f"   - Priority: {record.priority}")
            if record.area_path:
                lines.append(f"   - Area Path: {record.area_path}")
            if record.steps:
                lines.append(
                    f"   - Steps: {_truncate(record.steps, settings.preview_steps_max_chars)}"
                )
            lines.append("")

        remaining = len(result.records) - len(shown)
        if remaining > 0:
            lines.append(f"... and {remaining} more test cases")
            lines.append("")

    return "\n".join(lines) + "\n"
