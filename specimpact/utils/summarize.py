"""Report summarization and text rendering.

Turns an ImpactReport into grouped, colored console output and summary
counts for the CLI.
"""

from collections import Counter
from typing import Any

import click

from specimpact.models.impact import IMPACT_TYPES, ImpactReport, ImpactResult

_STYLES: dict[str, tuple[str, str, str]] = {
    # impact type -> (title, color, icon)
    "added": ("Added", "green", "✅"),
    "removed": ("Removed", "red", "❌"),
    "modified": ("Modified", "yellow", "⚠️"),
}


def summarize_report(report: ImpactReport) -> dict[str, Any]:
    """Count impacts per type.

    Args:
        report: Analysis result.

    Returns:
        Dict with total, one count per impact type, indirect count and the
        number of distinct test files involved.
    """
    counts = Counter(impact.impact_type for impact in report.impacts)
    return {
        "total": len(report.impacts),
        **{impact_type: counts.get(impact_type, 0) for impact_type in IMPACT_TYPES},
        "indirect": report.indirect_count,
        "files": len({impact.file_path for impact in report.impacts}),
    }


def _format_impact(impact: ImpactResult, color: str) -> str:
    line = click.style(f'   • "{impact.test_name}"', fg=color)
    line += click.style(f" in {impact.file_path}", fg="bright_black")
    if impact.is_indirect:
        line += click.style(" (indirect)", fg="cyan")
    return line


def render_text(report: ImpactReport) -> list[str]:
    """Render a report as console lines, grouped by impact type."""
    lines = [
        click.style(f"\n Analyzing commit: {report.commit}", fg="blue", bold=True),
        click.style(f"Repository: {report.repository}", fg="bright_black"),
    ]

    if not report.impacts:
        lines.append(click.style("No test impacts found for this commit.", fg="yellow"))
        return lines

    for impact_type in IMPACT_TYPES:
        group = report.by_type(impact_type)
        if not group:
            continue
        title, color, icon = _STYLES[impact_type]
        lines.append(click.style(f"\n{icon} {title} Tests ({len(group)}):", bold=True))
        lines.extend(_format_impact(impact, color) for impact in group)

    summary = summarize_report(report)
    lines.append(click.style("\n Summary:", bold=True))
    lines.append(f"   Total impacts: {click.style(str(summary['total']), bold=True)}")
    lines.append(f"   Added: {click.style(str(summary['added']), fg='green')}")
    lines.append(f"   Removed: {click.style(str(summary['removed']), fg='red')}")
    lines.append(f"   Modified: {click.style(str(summary['modified']), fg='yellow')}")
    if summary["indirect"]:
        lines.append(f"   Indirect (via helpers): {click.style(str(summary['indirect']), fg='cyan')}")
    return lines
