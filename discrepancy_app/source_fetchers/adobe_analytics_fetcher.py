"""
Adobe Analytics Fetcher

Pulls a day-by-day report from the Adobe Analytics 2.0 Reports API
(`POST /api/{company_id}/reports`) using the `variables/daterangeday`
dimension, one column per requested metric.

Authentication is pass-through: the caller supplies an access token and the
API key (client id); nothing here obtains or refreshes tokens.
"""

import logging
from datetime import date, timedelta
from typing import Any, Dict, List

import pandas as pd

from discrepancy_app.core.exceptions import SourceFetchError
from discrepancy_app.metric_catalog.catalog_models import Platform
from .base_fetcher import HttpSourceFetcher

logger = logging.getLogger(__name__)

ADOBE_API_ROOT = "https://analytics.adobe.io/api"
DAY_DIMENSION = "variables/daterangeday"
# Adobe renders daterangeday items as e.g. "Jan 1, 2024"
DAY_VALUE_FORMAT = "%b %d, %Y"


class AdobeAnalyticsFetcher(HttpSourceFetcher):
    """
    Source fetcher for Adobe Analytics report suites.
    """

    def __init__(
        self,
        company_id: str,
        report_suite_id: str,
        client_id: str,
        access_token: str,
        platform: Platform = Platform.A,
        page_limit: int = 400,
        session=None,
        timeout: float = 60.0
    ):
        super().__init__(platform, session=session, timeout=timeout)
        self.company_id = company_id
        self.report_suite_id = report_suite_id
        self.client_id = client_id
        self.access_token = access_token
        self.page_limit = page_limit

    @property
    def reports_url(self) -> str:
        return f"{ADOBE_API_ROOT}/{self.company_id}/reports"

    def fetch_daily_series(
        self, start_date: date, end_date: date, fields: List[str]
    ) -> pd.DataFrame:
        metrics = list(dict.fromkeys(fields))
        records = []
        page = 0
        while True:
            body = self._post_json(self.reports_url, self._build_request(start_date, end_date, metrics, page), self._headers())
            records.extend(self._parse_rows(body, metrics))
            if body.get("lastPage", True):
                break
            page += 1

        logger.info(
            "Fetched %d days of %d metrics from Adobe report suite %s",
            len(records), len(metrics), self.report_suite_id
        )
        df = pd.DataFrame(records, columns=["date"] + metrics)
        df["date"] = pd.to_datetime(df["date"])
        return df.sort_values("date").reset_index(drop=True)

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.access_token}",
            "x-api-key": self.client_id,
            "x-proxy-global-company-id": self.company_id,
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    def _build_request(self, start_date: date, end_date: date, metrics: List[str], page: int) -> Dict[str, Any]:
        # Adobe date ranges are half-open, so extend to midnight after end_date
        range_end = end_date + timedelta(days=1)
        date_range = f"{start_date.isoformat()}T00:00:00.000/{range_end.isoformat()}T00:00:00.000"
        return {
            "rsid": self.report_suite_id,
            "globalFilters": [{"type": "dateRange", "dateRange": date_range}],
            "metricContainer": {
                "metrics": [
                    {"columnId": str(i), "id": metric_id} for i, metric_id in enumerate(metrics)
                ]
            },
            "dimension": DAY_DIMENSION,
            "settings": {
                "limit": self.page_limit,
                "page": page,
                "dimensionSort": "asc",
            },
        }

    def _parse_rows(self, body: Dict[str, Any], metrics: List[str]) -> List[Dict[str, Any]]:
        records = []
        for row in body.get("rows", []):
            try:
                day = pd.to_datetime(row["value"], format=DAY_VALUE_FORMAT)
                data = row["data"]
            except (KeyError, ValueError) as e:
                raise SourceFetchError(f"Unexpected Adobe report row {row!r}: {e}") from e
            if len(data) != len(metrics):
                raise SourceFetchError(
                    f"Adobe row for {row['value']} has {len(data)} values, expected {len(metrics)}."
                )
            record = {"date": day}
            record.update(dict(zip(metrics, data)))
            records.append(record)
        return records
