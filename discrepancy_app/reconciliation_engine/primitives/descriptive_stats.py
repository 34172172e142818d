import numpy as np
import pandas as pd
from typing import Optional, Tuple
from scipy.stats import median_abs_deviation

from discrepancy_app.core.exceptions import EmptyDataError, SchemaError
from discrepancy_app.reconciliation_engine.data_structures import SummaryStats
from .discrepancy import DATE_COL, metric_columns


def summarize(
    rows: pd.DataFrame,
    label: str,
    date_col: str = DATE_COL,
    iqr_multiplier: float = 1.5
) -> SummaryStats:
    """
    Summarize the distribution of daily (A - B) differences for one metric.

    Parameters
    ----------
    rows : pd.DataFrame
        Output of `combine` (or `select_metric`), containing date_col and
        '<label>_diff' / '<label>_pct_diff'.
    label : str
        The metric label to summarize.
    date_col : str, default 'date'
    iqr_multiplier : float, default 1.5
        Tukey fence multiplier used for the whiskers and outliers.

    Returns
    -------
    SummaryStats
        - daily_diffs: non-null diffs indexed by date, in row order
        - count, mean, median (median of an even count is the mean of the two
          middle values)
        - min, q25, q75, max, iqr: quartiles use linear interpolation
        - lower_whisker / upper_whisker: most extreme observations within
          [q25 - iqr_multiplier*IQR, q75 + iqr_multiplier*IQR]
        - outliers: observations outside those fences, indexed by date
        - std, mad: sample standard deviation (None for a single value) and
          normal-scaled median absolute deviation
        - mean_pct_diff / median_pct_diff: over the non-null percent
          differences, None if there are none

    Raises
    ------
    SchemaError
        If rows has no diff column for label.
    EmptyDataError
        If every diff for label is null.
    """
    cols = metric_columns(label)
    for needed in (date_col, cols["diff"]):
        if needed not in rows.columns:
            raise SchemaError(f"Rows have no '{needed}' column for metric '{label}'.")

    diffs = pd.Series(
        rows[cols["diff"]].to_numpy(dtype=float),
        index=pd.DatetimeIndex(rows[date_col], name=date_col),
        name=cols["diff"],
    ).dropna()

    if diffs.empty:
        raise EmptyDataError(
            f"No overlapping non-null data for metric '{label}'; no comparison possible."
        )

    arr = diffs.to_numpy()

    # Basic stats
    mean_val = float(arr.mean())
    med = float(np.median(arr))
    q25 = float(np.percentile(arr, 25))
    q75 = float(np.percentile(arr, 75))
    iqr_val = q75 - q25
    std_val = float(arr.std(ddof=1)) if len(arr) > 1 else None      # sample-based
    mad_val = float(median_abs_deviation(arr, scale="normal"))

    # Whiskers stop at the last observation inside the fences
    lower_fence = q25 - iqr_multiplier * iqr_val
    upper_fence = q75 + iqr_multiplier * iqr_val
    inside = arr[(arr >= lower_fence) & (arr <= upper_fence)]
    outlier_mask = (diffs < lower_fence) | (diffs > upper_fence)

    mean_pct, median_pct = _pct_diff_center(rows, cols["pct_diff"])

    return SummaryStats(
        label=label,
        daily_diffs=diffs,
        count=int(len(arr)),
        mean=mean_val,
        median=med,
        min=float(arr.min()),
        q25=q25,
        q75=q75,
        max=float(arr.max()),
        iqr=float(iqr_val),
        lower_whisker=float(inside.min()),
        upper_whisker=float(inside.max()),
        outliers=diffs[outlier_mask],
        std=std_val,
        mad=mad_val,
        mean_pct_diff=mean_pct,
        median_pct_diff=median_pct,
    )


def _pct_diff_center(rows: pd.DataFrame, pct_col: str) -> Tuple[Optional[float], Optional[float]]:
    if pct_col not in rows.columns:
        return None, None
    pct = rows[pct_col].astype(float).dropna()
    if pct.empty:
        return None, None
    return float(pct.mean()), float(pct.median())
