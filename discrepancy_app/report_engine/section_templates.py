"""
section_templates.py

Narrative text for each metric section: the mean/median sentences that sit
under the charts, and the notice used when a metric cannot be compared.
"""

from typing import Optional

from discrepancy_app.metric_catalog.catalog_models import MetricSpec
from discrepancy_app.reconciliation_engine.data_structures import SummaryStats
from .report_data_structures import ReportSection, STATUS_COMPARED, STATUS_NO_COMPARISON


def format_number(value: float) -> str:
    if float(value).is_integer():
        return f"{value:,.0f}"
    return f"{value:,.2f}"


def format_percent(value: Optional[float]) -> str:
    if value is None:
        return "n/a"
    return f"{value * 100:+.1f}%"


def _more_or_fewer(value: float) -> str:
    return "more" if value >= 0 else "fewer"


def _section_title(spec: MetricSpec) -> str:
    if spec.description:
        return f"{spec.label}: {spec.description}"
    return spec.label

##############################################################################
# Compared metric
##############################################################################

def section_compared(
    spec: MetricSpec,
    stats: SummaryStats,
    name_a: str,
    name_b: str
) -> ReportSection:
    label = spec.label
    body = (
        f"Across {stats.count} days reported by both platforms, {name_a} recorded on average "
        f"{format_number(abs(stats.mean))} {_more_or_fewer(stats.mean)} {label} per day than {name_b}. "
        f"The median daily difference was {format_number(abs(stats.median))} "
        f"{_more_or_fewer(stats.median)} {label}."
    )
    if stats.median_pct_diff is not None:
        body += (
            f" Relative to {name_b}, the median day differed by {format_percent(stats.median_pct_diff)} "
            f"(mean {format_percent(stats.mean_pct_diff)})."
        )
    if len(stats.outliers):
        days = ", ".join(d.strftime("%Y-%m-%d") for d in stats.outliers.index)
        body += f" Outlying days: {days}."

    return ReportSection(
        label=label,
        title=_section_title(spec),
        body=body,
        status=STATUS_COMPARED,
        stats=stats,
    )

##############################################################################
# No overlapping data
##############################################################################

def section_no_comparison(
    spec: MetricSpec,
    name_a: str,
    name_b: str
) -> ReportSection:
    body = (
        f"No comparison possible: {name_a} and {name_b} share no days with data "
        f"for {spec.label} in this period."
    )
    return ReportSection(
        label=spec.label,
        title=_section_title(spec),
        body=body,
        status=STATUS_NO_COMPARISON,
    )
