"""Fixed-column text rendering of a fastqcheck Report."""

from typing import List

from fastqcheck.reader import BASES
from fastqcheck.stats import STD_DEV_CONFIDENCE, Report, ScopeSummary


def _format_row(label: str, summary: ScopeSummary) -> str:
    composition = " ".join(f"{pct:4.1f}" for pct in summary.composition)
    permille = "".join(f" {v:3d}" for v in summary.quality_permille)
    return f"{label}  {composition} {permille} {summary.average_quality:4.1f}"


def render_lines(report: Report) -> List[str]:
    """Render the report as a list of lines without terminators."""
    first = f"{report.record_count} sequences, {report.total_length} total length"
    if report.record_count:
        first += f", {report.average_length:.1f} average, {report.max_length} max"
    lines = [first]

    if report.overall is None:
        return lines

    lines.append(f"Standard deviations at {STD_DEV_CONFIDENCE}:  "
                 f"total {report.total_std_dev:5.2f} %, per base {report.per_base_std_dev:5.2f} %")

    header = "        " + "".join(f"{base:>5}" for base in BASES) + " "
    header += "".join(f" {q:3d}" for q in report.quality_values)
    lines.append(header + " AQ")

    lines.append(_format_row("Total  ", report.overall))
    for i, summary in enumerate(report.positions):
        if summary is None:
            continue
        lines.append(_format_row(f"base {i + 1:2d}", summary))
    return lines


def render_report(report: Report) -> str:
    return "\n".join(render_lines(report)) + "\n"
