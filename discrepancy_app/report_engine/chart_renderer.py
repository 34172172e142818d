"""
Chart rendering for report sections.

Three figures per compared metric:
  - actual values from both platforms over time
  - daily % difference (A / B - 1)
  - distribution of the daily difference as a box plot, drawn from the
    quartiles and whiskers already computed in SummaryStats
"""

import os
from typing import Dict

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd

from discrepancy_app.reconciliation_engine.data_structures import Comparison, SummaryStats
from discrepancy_app.reconciliation_engine.primitives.discrepancy import DATE_COL, metric_columns

COLOR_A = "#2E86AB"
COLOR_B = "#F18F01"
COLOR_DIFF = "#A23B72"


class ChartRenderer:
    """Writes PNG charts for a Comparison into output_dir."""

    def __init__(self, output_dir: str, dpi: int = 110):
        self.output_dir = output_dir
        self.dpi = dpi
        os.makedirs(self.output_dir, exist_ok=True)

    def render_all(self, comparison: Comparison, name_a: str, name_b: str) -> Dict[str, str]:
        return {
            "actual_values": self.plot_actual_values(comparison.rows, comparison.label, name_a, name_b),
            "percent_difference": self.plot_percent_difference(comparison.rows, comparison.label, name_a, name_b),
            "difference_distribution": self.plot_difference_boxplot(comparison.stats, name_a, name_b),
        }

    def plot_actual_values(self, rows: pd.DataFrame, label: str, name_a: str, name_b: str) -> str:
        cols = metric_columns(label)
        fig, ax = plt.subplots(figsize=(10, 4))
        ax.plot(rows[DATE_COL], rows[cols["value_a"]], marker="o", color=COLOR_A, label=name_a)
        ax.plot(rows[DATE_COL], rows[cols["value_b"]], marker="o", color=COLOR_B, label=name_b)
        ax.set_title(f"{label}: actual values")
        ax.set_ylabel(label)
        ax.legend()
        return self._save(fig, f"{label}_actual_values.png")

    def plot_percent_difference(self, rows: pd.DataFrame, label: str, name_a: str, name_b: str) -> str:
        cols = metric_columns(label)
        fig, ax = plt.subplots(figsize=(10, 4))
        ax.plot(rows[DATE_COL], rows[cols["pct_diff"]] * 100.0, marker="o", color=COLOR_DIFF)
        ax.axhline(0.0, color="grey", linewidth=0.8, linestyle="--")
        ax.set_title(f"{label}: % difference ({name_a} vs {name_b})")
        ax.set_ylabel("% difference")
        return self._save(fig, f"{label}_percent_difference.png")

    def plot_difference_boxplot(self, stats: SummaryStats, name_a: str, name_b: str) -> str:
        box = {
            "label": stats.label,
            "med": stats.median,
            "q1": stats.q25,
            "q3": stats.q75,
            "whislo": stats.lower_whisker,
            "whishi": stats.upper_whisker,
            "mean": stats.mean,
            "fliers": stats.outliers.to_numpy(),
        }
        fig, ax = plt.subplots(figsize=(5, 5))
        ax.bxp([box], showmeans=True)
        ax.set_title(f"{stats.label}: daily difference ({name_a} - {name_b})")
        ax.set_ylabel("Difference")
        return self._save(fig, f"{stats.label}_difference_distribution.png")

    def _save(self, fig, file_name: str) -> str:
        path = os.path.join(self.output_dir, file_name)
        fig.autofmt_xdate()
        fig.tight_layout()
        fig.savefig(path, dpi=self.dpi)
        plt.close(fig)
        return path
