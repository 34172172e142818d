import toml
from typing import Any, Dict, List
from .catalog_models import MetricCatalog, MetricSpec
from discrepancy_app.core.exceptions import ConfigurationError

# Accepted keys for each side, in order of preference.
_FIELD_A_KEYS = ("source_field_a", "adobe_field")
_FIELD_B_KEYS = ("source_field_b", "google_field")


def parse_metric_catalog_toml(toml_str: str) -> MetricCatalog:
    try:
        data = toml.loads(toml_str)
    except toml.TomlDecodeError as e:
        raise ConfigurationError(f"Metric catalog is not valid TOML: {e}") from e
    return parse_metric_catalog(data.get("metrics", []))


def parse_metric_catalog(raw_metrics: List[Dict[str, Any]]) -> MetricCatalog:
    """
    Build a MetricCatalog from already-decoded `[[metrics]]` tables.
    """
    metric_specs = []
    for position, raw_m in enumerate(raw_metrics):
        metric_specs.append(_parse_single_metric(raw_m, position))
    return MetricCatalog(metrics=metric_specs)


def _parse_single_metric(raw_m: Dict[str, Any], position: int) -> MetricSpec:
    if "label" not in raw_m:
        raise ConfigurationError(f"Metric #{position + 1} has no 'label'.")
    label = raw_m["label"]

    return MetricSpec(
        label=label,
        source_field_a=_pick_field(raw_m, _FIELD_A_KEYS, label),
        source_field_b=_pick_field(raw_m, _FIELD_B_KEYS, label),
        description=raw_m.get("description"),
    )


def _pick_field(raw_m: Dict[str, Any], keys, label: str) -> str:
    for key in keys:
        if key in raw_m:
            return raw_m[key]
    raise ConfigurationError(
        f"Metric '{label}' must define one of {list(keys)}."
    )
