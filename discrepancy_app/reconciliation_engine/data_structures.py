from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pandas as pd


@dataclass
class SummaryStats:
    """
    Distribution of the daily (A - B) differences for one metric.
    """
    label: str
    daily_diffs: pd.Series          # non-null diffs indexed by date, ascending
    count: int
    mean: float
    median: float

    # Box-plot buckets
    min: float
    q25: float
    q75: float
    max: float
    iqr: float
    lower_whisker: float
    upper_whisker: float
    outliers: pd.Series = field(default_factory=lambda: pd.Series(dtype=float))

    # Spread; std is None for a single observation
    std: Optional[float] = None
    mad: Optional[float] = None

    # Percentage view, None if B never had a usable basis
    mean_pct_diff: Optional[float] = None
    median_pct_diff: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert this object to a Python dict (e.g., for JSON serialization).
        """
        return {
            "label": self.label,
            "daily_diffs": _series_to_records(self.daily_diffs),
            "count": self.count,
            "mean": self.mean,
            "median": self.median,
            "min": self.min,
            "q25": self.q25,
            "q75": self.q75,
            "max": self.max,
            "iqr": self.iqr,
            "lower_whisker": self.lower_whisker,
            "upper_whisker": self.upper_whisker,
            "outliers": _series_to_records(self.outliers),
            "std": self.std,
            "mad": self.mad,
            "mean_pct_diff": self.mean_pct_diff,
            "median_pct_diff": self.median_pct_diff,
        }


@dataclass
class Comparison:
    """
    Everything a report section needs for one metric.
    """
    label: str
    rows: pd.DataFrame       # combined rows restricted to this metric's columns
    stats: SummaryStats


def _series_to_records(series: pd.Series) -> List[Dict[str, Any]]:
    return [
        {"date": pd.Timestamp(idx).strftime("%Y-%m-%d"), "value": float(val)}
        for idx, val in series.items()
    ]
