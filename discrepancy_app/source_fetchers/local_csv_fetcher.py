import logging
import os
import pandas as pd
from datetime import date
from typing import List

from discrepancy_app.core.exceptions import SourceFetchError
from discrepancy_app.metric_catalog.catalog_models import Platform
from .base_fetcher import BaseSourceFetcher

logger = logging.getLogger(__name__)


class LocalCSVSourceFetcher(BaseSourceFetcher):
    """
    Reads a local CSV export of one platform's daily report.
    The CSV must have a date column plus one column per source field.
    """

    def __init__(self, platform: Platform, csv_path: str, date_col: str = "date"):
        """
        :param platform: which side of the comparison this export belongs to
        :param csv_path: path to the CSV file
        :param date_col: name of the CSV column holding the day
        """
        super().__init__(platform)
        self.csv_path = csv_path
        self.date_col = date_col

    def fetch_daily_series(
        self, start_date: date, end_date: date, fields: List[str]
    ) -> pd.DataFrame:
        df = self._read_csv()
        # Filter by calendar day, end inclusive
        days = df["date"].dt.normalize()
        df = df[(days >= pd.Timestamp(start_date)) & (days <= pd.Timestamp(end_date))]

        present = [f for f in dict.fromkeys(fields) if f in df.columns]
        absent = [f for f in fields if f not in df.columns]
        if absent:
            logger.warning("CSV %s has no columns %s", self.csv_path, absent)
        return df[["date"] + present].reset_index(drop=True)

    def _read_csv(self) -> pd.DataFrame:
        if not os.path.exists(self.csv_path):
            raise SourceFetchError(f"No CSV found for platform {self.platform.name} at {self.csv_path}")

        try:
            df = pd.read_csv(self.csv_path)
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
            raise SourceFetchError(f"Could not read CSV {self.csv_path}: {e}") from e
        if self.date_col not in df.columns:
            raise SourceFetchError(f"CSV {self.csv_path} has no '{self.date_col}' column.")
        df = df.rename(columns={self.date_col: "date"})
        try:
            df["date"] = pd.to_datetime(df["date"])
        except (ValueError, TypeError) as e:
            raise SourceFetchError(f"CSV {self.csv_path} has unparseable dates: {e}") from e
        df.sort_values("date", inplace=True)
        return df
