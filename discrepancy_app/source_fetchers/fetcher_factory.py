from typing import Any, Dict, List

from discrepancy_app.core.exceptions import ConfigurationError
from discrepancy_app.metric_catalog.catalog_models import Platform
from .adobe_analytics_fetcher import AdobeAnalyticsFetcher
from .base_fetcher import BaseSourceFetcher
from .google_analytics_fetcher import GoogleAnalyticsFetcher
from .local_csv_fetcher import LocalCSVSourceFetcher

# Options each fetcher kind cannot run without.
_REQUIRED_OPTIONS: Dict[str, List[str]] = {
    "adobe": ["company_id", "report_suite_id", "client_id", "access_token"],
    "google": ["property_id", "access_token"],
    "csv": ["path"],
}


def build_fetcher(platform: Platform, kind: str, options: Dict[str, Any]) -> BaseSourceFetcher:
    """
    Instantiate the fetcher for one side of the comparison.
    """
    if kind not in _REQUIRED_OPTIONS:
        raise ConfigurationError(
            f"Unknown fetcher kind '{kind}' for platform {platform.name}. "
            f"Must be one of {sorted(_REQUIRED_OPTIONS)}"
        )
    missing = [o for o in _REQUIRED_OPTIONS[kind] if not options.get(o)]
    if missing:
        raise ConfigurationError(f"Platform {platform.name} ({kind}) is missing options: {missing}")

    try:
        timeout = float(options.get("timeout", 60.0))
    except (TypeError, ValueError):
        raise ConfigurationError(
            f"Platform {platform.name} timeout must be a number, got {options.get('timeout')!r}"
        ) from None
    if kind == "adobe":
        return AdobeAnalyticsFetcher(
            company_id=options["company_id"],
            report_suite_id=options["report_suite_id"],
            client_id=options["client_id"],
            access_token=options["access_token"],
            platform=platform,
            timeout=timeout,
        )
    if kind == "google":
        return GoogleAnalyticsFetcher(
            property_id=str(options["property_id"]),
            access_token=options["access_token"],
            platform=platform,
            timeout=timeout,
        )
    return LocalCSVSourceFetcher(
        platform=platform,
        csv_path=options["path"],
        date_col=options.get("date_col", "date"),
    )
