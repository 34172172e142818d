# =============================================================================
# Discrepancy
#
# Primitives for aligning two daily series by date and computing, per metric:
#   <label>_a         value reported by platform A
#   <label>_b         value reported by platform B
#   <label>_diff      A - B
#   <label>_pct_diff  A / B - 1   (NaN when B is 0 or missing)
#
# Dependencies:
#   - pandas as pd
# =============================================================================

import logging
from typing import Dict, List

import pandas as pd

from discrepancy_app.core.exceptions import SchemaError
from discrepancy_app.metric_catalog.catalog_models import MetricCatalog, Platform

logger = logging.getLogger(__name__)

DATE_COL = "date"

# -----------------------------------------------------------------------------
# Helper Functions
# -----------------------------------------------------------------------------

def metric_columns(label: str) -> Dict[str, str]:
    """
    Column names emitted by `combine` for one metric label.
    """
    return {
        "value_a": f"{label}_a",
        "value_b": f"{label}_b",
        "diff": f"{label}_diff",
        "pct_diff": f"{label}_pct_diff",
    }


def _prepare_side(
    series: pd.DataFrame,
    catalog: MetricCatalog,
    platform: Platform,
    date_col: str
) -> pd.DataFrame:
    """
    Validate one input series and rename its source fields to catalog columns.
    Returns a frame with [date_col, <label>_a|b ...] and one row per date.
    """
    side = platform.value.upper()
    if date_col not in series.columns:
        raise SchemaError(f"Series {side} has no '{date_col}' column.")

    wanted = catalog.fields_for(platform)
    missing = [f for f in dict.fromkeys(wanted) if f not in series.columns]
    if missing:
        raise SchemaError(f"Series {side} is missing catalog fields: {missing}")

    dates = pd.to_datetime(series[date_col], errors="coerce")
    if dates.isna().any():
        raise SchemaError(f"Series {side} has missing or unparseable dates.")
    dates = dates.dt.normalize()

    duplicated = dates[dates.duplicated()]
    if not duplicated.empty:
        shown = sorted({d.strftime("%Y-%m-%d") for d in duplicated})
        raise SchemaError(f"Series {side} repeats dates: {shown}")

    prepared = pd.DataFrame({date_col: dates.to_numpy()})
    for spec in catalog:
        source_field = spec.source_field(platform)
        try:
            values = pd.to_numeric(series[source_field])
        except (ValueError, TypeError) as e:
            raise SchemaError(
                f"Series {side} field '{source_field}' is not numeric: {e}"
            ) from e
        prepared[metric_columns(spec.label)[f"value_{platform.value}"]] = (
            values.astype("float64").to_numpy()
        )
    return prepared

# -----------------------------------------------------------------------------
# Main Analysis Functions
# -----------------------------------------------------------------------------

def combine(
    series_a: pd.DataFrame,
    series_b: pd.DataFrame,
    catalog: MetricCatalog,
    date_col: str = DATE_COL
) -> pd.DataFrame:
    """
    Full outer join of two daily series on date, with per-metric differences.

    Parameters
    ----------
    series_a : pd.DataFrame
        Platform A rows: [date_col, <source_field_a> ...].
    series_b : pd.DataFrame
        Platform B rows: [date_col, <source_field_b> ...].
    catalog : MetricCatalog
        Which fields to compare, and the labels to publish them under.
    date_col : str, default 'date'

    Returns
    -------
    pd.DataFrame
        One row per date in the union of both inputs, strictly ascending, with
        columns [date_col] + for each metric [<label>_a, <label>_b,
        <label>_diff, <label>_pct_diff].
        Dates present on one side only carry NaN for the other side and for
        both derived columns.

    Raises
    ------
    SchemaError
        If either input lacks date_col or a field the catalog references,
        repeats a date, or holds non-numeric values in a referenced field.
    """
    side_a = _prepare_side(series_a, catalog, Platform.A, date_col)
    side_b = _prepare_side(series_b, catalog, Platform.B, date_col)

    merged = pd.merge(side_a, side_b, on=date_col, how="outer")
    merged.sort_values(date_col, inplace=True)
    merged.reset_index(drop=True, inplace=True)

    ordered_cols: List[str] = [date_col]
    for spec in catalog:
        cols = metric_columns(spec.label)
        value_a = merged[cols["value_a"]]
        value_b = merged[cols["value_b"]]
        merged[cols["diff"]] = value_a - value_b
        # a zero basis has no defined ratio
        merged[cols["pct_diff"]] = value_a.div(value_b.where(value_b != 0)) - 1.0
        ordered_cols.extend([cols["value_a"], cols["value_b"], cols["diff"], cols["pct_diff"]])

    logger.debug(
        "Combined %d rows from A and %d rows from B into %d dates",
        len(side_a), len(side_b), len(merged)
    )
    return merged[ordered_cols]


def select_metric(rows: pd.DataFrame, label: str, date_col: str = DATE_COL) -> pd.DataFrame:
    """
    Restrict combined rows to the date column and one metric's four columns.
    """
    cols = list(metric_columns(label).values())
    missing = [c for c in cols if c not in rows.columns]
    if missing:
        raise SchemaError(f"Combined rows have no columns for metric '{label}': {missing}")
    return rows[[date_col] + cols].copy()
