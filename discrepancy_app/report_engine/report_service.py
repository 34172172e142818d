# discrepancy_app/report_engine/report_service.py

import logging
import os
from typing import Dict, Optional, Tuple

import pandas as pd

from discrepancy_app.config.report_config import ReportConfig
from discrepancy_app.core.exceptions import EmptyDataError
from discrepancy_app.metric_catalog.catalog_models import Platform
from discrepancy_app.reconciliation_engine.comparison_service import ComparisonService
from discrepancy_app.source_fetchers.base_fetcher import BaseSourceFetcher
from .chart_renderer import ChartRenderer
from .report_data_structures import ReportResult
from .report_generator import ReportGenerator
from .section_templates import section_compared, section_no_comparison

logger = logging.getLogger(__name__)

REPORT_FILE_NAME = "report.md"
FIGURE_DIR_NAME = "figures"


class ReportService:
    """
    Runs one report: fetch both platforms, compare each metric, render
    charts and narrative, write the document.

    A metric with no overlapping data gets a flagged section and the run
    carries on. Configuration and schema problems abort the run.
    """

    def __init__(
        self,
        config: ReportConfig,
        fetchers: Dict[Platform, BaseSourceFetcher],
        renderer: Optional[ChartRenderer] = None
    ):
        self.config = config
        self.fetchers = fetchers
        self.renderer = renderer or ChartRenderer(os.path.join(config.output_dir, FIGURE_DIR_NAME))
        self.generator = ReportGenerator(config.output_dir)

    def fetch_series(self) -> Tuple[pd.DataFrame, pd.DataFrame]:
        """
        Fetch A then B over the configured closed date range.
        """
        series = {}
        for platform in (Platform.A, Platform.B):
            fields = self.config.catalog.fields_for(platform)
            logger.info(
                "Fetching %d fields from %s for %s..%s",
                len(fields), self.config.display_name(platform),
                self.config.start_date, self.config.end_date
            )
            series[platform] = self.fetchers[platform].fetch_daily_series(
                self.config.start_date, self.config.end_date, fields
            )
        return series[Platform.A], series[Platform.B]

    def run(self) -> ReportResult:
        series_a, series_b = self.fetch_series()
        comparison_svc = ComparisonService(series_a, series_b, self.config.catalog)

        name_a = self.config.display_name(Platform.A)
        name_b = self.config.display_name(Platform.B)

        sections = []
        for spec in self.config.catalog:
            try:
                comparison = comparison_svc.get_comparison(spec.label)
            except EmptyDataError as e:
                logger.warning("Skipping %s: %s", spec.label, e)
                sections.append(section_no_comparison(spec, name_a, name_b))
                continue

            section = section_compared(spec, comparison.stats, name_a, name_b)
            section.figures = self.renderer.render_all(comparison, name_a, name_b)
            sections.append(section)

        os.makedirs(self.config.output_dir, exist_ok=True)
        report_path = os.path.join(self.config.output_dir, REPORT_FILE_NAME)
        document = self.generator.render(
            title=self.config.title,
            start_date=self.config.start_date,
            end_date=self.config.end_date,
            name_a=name_a,
            name_b=name_b,
            sections=sections,
        )
        with open(report_path, "w") as f:
            f.write(document)

        result = ReportResult(report_path=report_path, sections=sections)
        logger.info(
            "Wrote %s with %d sections (%d without comparison)",
            report_path, len(sections), len(result.skipped_labels)
        )
        return result
