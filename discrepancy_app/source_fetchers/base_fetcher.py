import pandas as pd
import requests
from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Dict, List

from discrepancy_app.core.exceptions import SourceFetchError
from discrepancy_app.metric_catalog.catalog_models import Platform


class BaseSourceFetcher(ABC):
    """
    An abstract class that describes the common interface for a Source Fetcher.
    """

    def __init__(self, platform: Platform):
        self.platform = platform

    @abstractmethod
    def fetch_daily_series(
        self, start_date: date, end_date: date, fields: List[str]
    ) -> pd.DataFrame:
        """
        Return a DataFrame with columns [date, *fields], one row per day the
        source reports within the closed interval [start_date, end_date].
        Days the source omits are simply absent.
        """
        pass


class HttpSourceFetcher(BaseSourceFetcher):
    """
    Shared plumbing for fetchers that POST a JSON report request.
    One attempt per request; failures surface as SourceFetchError.
    """

    def __init__(self, platform: Platform, session=None, timeout: float = 60.0):
        super().__init__(platform)
        self.session = session or requests.Session()
        self.timeout = timeout

    def _post_json(self, url: str, payload: Dict[str, Any], headers: Dict[str, str]) -> Dict[str, Any]:
        try:
            response = self.session.post(url, json=payload, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            raise SourceFetchError(f"{self.platform.name} report request to {url} failed: {e}") from e
        except ValueError as e:
            raise SourceFetchError(f"{self.platform.name} report response is not JSON: {e}") from e
