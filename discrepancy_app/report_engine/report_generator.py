# discrepancy_app/report_engine/report_generator.py

import os
from datetime import date
from typing import List

from .report_data_structures import ReportSection, STATUS_COMPARED
from .section_templates import format_number, format_percent

# Figure order inside a section, with captions.
FIGURE_CAPTIONS = [
    ("actual_values", "Actual values"),
    ("percent_difference", "% difference"),
    ("difference_distribution", "Distribution of the daily difference"),
]


class ReportGenerator:
    """
    Lays out report sections in a fixed Markdown document.
    Figure paths are written relative to the report's directory.
    """

    def __init__(self, report_dir: str):
        self.report_dir = report_dir

    def render(
        self,
        title: str,
        start_date: date,
        end_date: date,
        name_a: str,
        name_b: str,
        sections: List[ReportSection]
    ) -> str:
        lines = [
            f"# {title}",
            "",
            f"Period: {start_date.isoformat()} to {end_date.isoformat()}. "
            f"Differences are {name_a} minus {name_b}; percentages use {name_b} as the basis.",
            "",
            "## Overview",
            "",
        ]
        lines.extend(self._overview_table(sections))

        for section in sections:
            lines.extend(["", f"## {section.title}", "", section.body])
            for kind, caption in FIGURE_CAPTIONS:
                if kind in section.figures:
                    rel_path = os.path.relpath(section.figures[kind], self.report_dir)
                    lines.extend(["", f"![{section.label} {caption.lower()}]({rel_path})"])
        lines.append("")
        return "\n".join(lines)

    def _overview_table(self, sections: List[ReportSection]) -> List[str]:
        rows = [
            "| Metric | Days compared | Mean diff | Median diff | Mean % diff |",
            "|---|---:|---:|---:|---:|",
        ]
        for section in sections:
            if section.status == STATUS_COMPARED and section.stats is not None:
                st = section.stats
                rows.append(
                    f"| {section.label} | {st.count} | {format_number(st.mean)} | "
                    f"{format_number(st.median)} | {format_percent(st.mean_pct_diff)} |"
                )
            else:
                rows.append(f"| {section.label} | 0 | n/a | n/a | n/a |")
        return rows
