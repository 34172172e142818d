import logging
from typing import List

import pandas as pd

from discrepancy_app.metric_catalog.catalog_models import MetricCatalog
from discrepancy_app.metric_catalog.catalog_service import load_validated_catalog
from .data_structures import Comparison
from .primitives.discrepancy import combine, select_metric
from .primitives.descriptive_stats import summarize

logger = logging.getLogger(__name__)


class ComparisonService:
    """
    Exposes, per metric label, the combined daily rows and their summary.

    The two fetched series and the catalog are held as explicit inputs;
    nothing derived from them is cached, so every call recomputes from the
    same inputs and returns the same result.
    """

    def __init__(self, series_a: pd.DataFrame, series_b: pd.DataFrame, catalog: MetricCatalog):
        self._catalog_svc = load_validated_catalog(catalog)
        self._series_a = series_a.copy()
        self._series_b = series_b.copy()

    @property
    def labels(self) -> List[str]:
        return self._catalog_svc.get_catalog().get_labels()

    def combined_rows(self) -> pd.DataFrame:
        """
        All metrics side by side, one row per date.
        """
        return combine(self._series_a, self._series_b, self._catalog_svc.get_catalog())

    def get_comparison(self, label: str) -> Comparison:
        """
        Return the rows and SummaryStats for `label`.

        Raises ConfigurationError for an unknown label, SchemaError for
        malformed inputs and EmptyDataError when the two series share no
        non-null data for this metric.
        """
        spec = self._catalog_svc.get_metric_by_label(label)
        rows = select_metric(self.combined_rows(), spec.label)
        stats = summarize(rows, spec.label)
        logger.info(
            "Compared %s over %d days: mean diff %.4g, median diff %.4g",
            spec.label, stats.count, stats.mean, stats.median
        )
        return Comparison(label=spec.label, rows=rows, stats=stats)
