import os
import re
import toml
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Optional

from discrepancy_app.core.exceptions import ConfigurationError
from discrepancy_app.metric_catalog.catalog_models import MetricCatalog, Platform
from discrepancy_app.metric_catalog.catalog_parser import parse_metric_catalog
from discrepancy_app.metric_catalog.catalog_service import load_validated_catalog

_ENV_REF = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")

# Section names accepted under [platforms] for each side.
_PLATFORM_KEYS = {
    Platform.A: ("a", "adobe"),
    Platform.B: ("b", "google"),
}
_DEFAULT_DISPLAY_NAMES = {
    Platform.A: "Adobe Analytics",
    Platform.B: "Google Analytics",
}


@dataclass
class PlatformSettings:
    """
    How to reach one platform. `options` are handed to the fetcher untouched.
    """
    kind: str                   # 'adobe', 'google' or 'csv'
    display_name: str
    options: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ReportConfig:
    start_date: date
    end_date: date
    catalog: MetricCatalog
    platforms: Dict[Platform, PlatformSettings]
    output_dir: str = "reports"
    title: str = "Analytics Discrepancy Report"

    def display_name(self, platform: Platform) -> str:
        return self.platforms[platform].display_name

    def with_overrides(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        output_dir: Optional[str] = None
    ) -> "ReportConfig":
        """Return a copy with command-line overrides applied and re-checked."""
        updated = ReportConfig(
            start_date=start_date or self.start_date,
            end_date=end_date or self.end_date,
            catalog=self.catalog,
            platforms=self.platforms,
            output_dir=output_dir or self.output_dir,
            title=self.title,
        )
        _check_date_range(updated.start_date, updated.end_date)
        return updated


def load_report_config(path: str) -> ReportConfig:
    if not os.path.exists(path):
        raise ConfigurationError(f"No report configuration found at {path}")
    with open(path, "r") as f:
        return parse_report_config_toml(f.read())


def parse_report_config_toml(toml_str: str) -> ReportConfig:
    try:
        data = toml.loads(toml_str)
    except toml.TomlDecodeError as e:
        raise ConfigurationError(f"Report configuration is not valid TOML: {e}") from e

    start = parse_date(data.get("start_date"), "start_date")
    end = parse_date(data.get("end_date"), "end_date")
    _check_date_range(start, end)

    catalog = parse_metric_catalog(data.get("metrics", []))
    load_validated_catalog(catalog)

    raw_platforms = data.get("platforms", {})
    platforms = {
        platform: _parse_platform(raw_platforms, platform)
        for platform in (Platform.A, Platform.B)
    }

    return ReportConfig(
        start_date=start,
        end_date=end,
        catalog=catalog,
        platforms=platforms,
        output_dir=data.get("output_dir", "reports"),
        title=data.get("title", "Analytics Discrepancy Report"),
    )


def parse_date(raw: Any, name: str) -> date:
    """
    Accept a TOML date or an ISO 'YYYY-MM-DD' string.
    """
    if raw is None:
        raise ConfigurationError(f"Missing required '{name}'.")
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    try:
        return date.fromisoformat(str(raw))
    except ValueError:
        raise ConfigurationError(f"'{name}' must be a YYYY-MM-DD date, got {raw!r}.") from None


def _check_date_range(start: date, end: date):
    if start > end:
        raise ConfigurationError(f"start_date {start} is after end_date {end}.")


def _parse_platform(raw_platforms: Dict[str, Any], platform: Platform) -> PlatformSettings:
    raw = None
    for key in _PLATFORM_KEYS[platform]:
        if key in raw_platforms:
            raw = raw_platforms[key]
            break
    if raw is None:
        raise ConfigurationError(
            f"Missing [platforms.{_PLATFORM_KEYS[platform][1]}] section."
        )

    options = {k: _expand_env(v) for k, v in raw.items() if k not in ("kind", "display_name")}
    return PlatformSettings(
        kind=raw.get("kind", _PLATFORM_KEYS[platform][1]),
        display_name=raw.get("display_name", _DEFAULT_DISPLAY_NAMES[platform]),
        options=options,
    )


def _expand_env(value: Any) -> Any:
    # "${VAR}" pulls secrets from the environment (or a loaded .env file);
    # unset variables expand to "" so required-option checks catch them
    if isinstance(value, str):
        return _ENV_REF.sub(lambda m: os.environ.get(m.group(1), ""), value)
    return value
