import re
from typing import Dict, List
from .catalog_models import MetricCatalog, MetricSpec
from discrepancy_app.core.exceptions import ConfigurationError
from discrepancy_app.reconciliation_engine.primitives.discrepancy import metric_columns

# Labels become column and file-name fragments.
_LABEL_PATTERN = re.compile(r"[A-Za-z0-9_]+")


class CatalogService:
    def __init__(self):
        self._catalog: MetricCatalog = MetricCatalog()
        self._metrics_by_label: Dict[str, MetricSpec] = {}

    def load_catalog(self, catalog: MetricCatalog):
        self._catalog = catalog
        self._metrics_by_label.clear()
        for m in catalog.metrics:
            self._metrics_by_label[m.label] = m

    def validate_catalog(self) -> bool:
        self._check_not_empty()
        self._check_label_format()
        self._check_duplicate_labels()
        self._check_column_collisions()
        self._check_source_fields()
        return True

    def _check_not_empty(self):
        if not self._catalog.metrics:
            raise ConfigurationError("Metric catalog defines no metrics.")

    def _check_label_format(self):
        for m in self._catalog.metrics:
            if not isinstance(m.label, str) or not _LABEL_PATTERN.fullmatch(m.label):
                raise ConfigurationError(
                    f"Metric label {m.label!r} may only contain letters, digits and underscores."
                )

    def _check_duplicate_labels(self):
        labels = self._catalog.get_labels()
        duplicates = sorted({lbl for lbl in labels if labels.count(lbl) > 1})
        if duplicates:
            raise ConfigurationError(f"Duplicate metric labels found: {duplicates}")

    def _check_column_collisions(self):
        # e.g. "Orders" and "Orders_pct" would both emit "Orders_pct_diff"
        owners: Dict[str, str] = {}
        for m in self._catalog.metrics:
            for col in metric_columns(m.label).values():
                other = owners.setdefault(col, m.label)
                if other != m.label:
                    raise ConfigurationError(
                        f"Metric labels '{other}' and '{m.label}' both produce column '{col}'."
                    )

    def _check_source_fields(self):
        for m in self._catalog.metrics:
            for source_field in (m.source_field_a, m.source_field_b):
                if not isinstance(source_field, str) or not source_field.strip():
                    raise ConfigurationError(
                        f"Metric '{m.label}' has a blank source field."
                    )

    def get_metric_by_label(self, label: str) -> MetricSpec:
        try:
            return self._metrics_by_label[label]
        except KeyError:
            raise ConfigurationError(f"Unknown metric label '{label}'.") from None

    def all_metrics(self) -> List[MetricSpec]:
        return list(self._catalog.metrics)

    def get_catalog(self) -> MetricCatalog:
        return self._catalog


def load_validated_catalog(catalog: MetricCatalog) -> CatalogService:
    """Convenience wrapper: load `catalog` into a service and validate it."""
    svc = CatalogService()
    svc.load_catalog(catalog)
    svc.validate_catalog()
    return svc
