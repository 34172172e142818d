import os
import pytest
import pandas as pd
from datetime import date

from discrepancy_app.bin.run_discrepancy_report import main
from discrepancy_app.config.report_config import PlatformSettings, ReportConfig
from discrepancy_app.core.exceptions import SchemaError
from discrepancy_app.metric_catalog.catalog_models import MetricCatalog, MetricSpec, Platform
from discrepancy_app.reconciliation_engine.primitives.descriptive_stats import summarize
from discrepancy_app.report_engine.report_data_structures import STATUS_COMPARED, STATUS_NO_COMPARISON
from discrepancy_app.report_engine.report_service import ReportService
from discrepancy_app.report_engine.section_templates import section_compared, section_no_comparison
from discrepancy_app.source_fetchers.base_fetcher import BaseSourceFetcher

CATALOG = MetricCatalog(metrics=[
    MetricSpec("UVs", "metrics/visitors", "totalUsers", description="Unique visitors"),
    MetricSpec("Orders", "metrics/orders", "ecommercePurchases"),
])


class StaticFetcher(BaseSourceFetcher):
    def __init__(self, platform, df):
        super().__init__(platform)
        self.df = df
        self.calls = []

    def fetch_daily_series(self, start_date, end_date, fields):
        self.calls.append((start_date, end_date, list(fields)))
        return self.df.copy()


def _config(output_dir):
    return ReportConfig(
        start_date=date(2024, 1, 1),
        end_date=date(2024, 1, 4),
        catalog=CATALOG,
        platforms={
            Platform.A: PlatformSettings(kind="csv", display_name="Adobe Analytics"),
            Platform.B: PlatformSettings(kind="csv", display_name="Google Analytics"),
        },
        output_dir=str(output_dir),
        title="Test parity",
    )


def _fetchers(series_b=None):
    series_a = pd.DataFrame({
        "date": pd.date_range("2024-01-01", periods=4, freq="D"),
        "metrics/visitors": [100, 120, 130, 125],
        "metrics/orders": [5, 6, 7, 8],
    })
    if series_b is None:
        series_b = pd.DataFrame({
            "date": pd.date_range("2024-01-01", periods=4, freq="D"),
            "totalUsers": [90, 110, 140, 120],
            "ecommercePurchases": [None, None, None, None],
        })
    return {
        Platform.A: StaticFetcher(Platform.A, series_a),
        Platform.B: StaticFetcher(Platform.B, series_b),
    }


def test_report_run_writes_document_and_figures(tmp_path):
    out = tmp_path / "out"
    fetchers = _fetchers()

    result = ReportService(_config(out), fetchers).run()

    # each platform asked for its own fields over the configured range
    assert fetchers[Platform.A].calls == [(date(2024, 1, 1), date(2024, 1, 4), ["metrics/visitors", "metrics/orders"])]
    assert fetchers[Platform.B].calls == [(date(2024, 1, 1), date(2024, 1, 4), ["totalUsers", "ecommercePurchases"])]

    assert result.report_path == os.path.join(str(out), "report.md")
    assert [s.label for s in result.sections] == ["UVs", "Orders"]
    assert result.skipped_labels == ["Orders"]

    uvs = result.sections[0]
    assert uvs.status == STATUS_COMPARED
    assert set(uvs.figures) == {"actual_values", "percent_difference", "difference_distribution"}
    for path in uvs.figures.values():
        assert os.path.exists(path)
    assert result.sections[1].figures == {}

    with open(result.report_path) as f:
        document = f.read()
    assert document.startswith("# Test parity")
    assert "Period: 2024-01-01 to 2024-01-04." in document
    assert "## UVs: Unique visitors" in document
    assert "![UVs actual values](figures/UVs_actual_values.png)" in document
    assert "| Orders | 0 | n/a | n/a | n/a |" in document
    assert "No comparison possible" in document


def test_schema_error_aborts_the_run(tmp_path):
    out = tmp_path / "out"
    broken_b = pd.DataFrame({"date": ["2024-01-01"], "activeUsers": [1], "ecommercePurchases": [1]})

    with pytest.raises(SchemaError):
        ReportService(_config(out), _fetchers(series_b=broken_b)).run()
    assert not os.path.exists(out / "report.md")


def test_section_text_for_compared_metric():
    rows = pd.DataFrame({
        "date": pd.date_range("2024-01-01", periods=3, freq="D"),
        "UVs_diff": [10.0, 10.0, -5.0],
        "UVs_pct_diff": [0.1, 0.1, -0.05],
    })
    stats = summarize(rows, "UVs")

    section = section_compared(CATALOG.metrics[0], stats, "Adobe Analytics", "Google Analytics")

    assert section.status == STATUS_COMPARED
    assert section.title == "UVs: Unique visitors"
    assert "Across 3 days" in section.body
    assert "Adobe Analytics recorded on average 5 more UVs per day than Google Analytics" in section.body
    assert "median daily difference was 10 more UVs" in section.body
    assert "+10.0%" in section.body
    assert section.to_dict()["stats"]["count"] == 3


def test_section_text_for_negative_difference_and_no_comparison():
    rows = pd.DataFrame({
        "date": pd.date_range("2024-01-01", periods=2, freq="D"),
        "Orders_diff": [-2.0, -3.0],
    })
    stats = summarize(rows, "Orders")

    section = section_compared(CATALOG.metrics[1], stats, "A", "B")
    assert "2.50 fewer Orders per day" in section.body

    skipped = section_no_comparison(CATALOG.metrics[1], "A", "B")
    assert skipped.status == STATUS_NO_COMPARISON
    assert skipped.stats is None
    assert skipped.body.startswith("No comparison possible")


def _write_csv_config(tmp_path):
    pd.DataFrame({
        "date": ["2024-01-01", "2024-01-02", "2024-01-03"],
        "metrics/visitors": [100, 105, 98],
    }).to_csv(tmp_path / "adobe.csv", index=False)
    pd.DataFrame({
        "date": ["2024-01-01", "2024-01-02", "2024-01-03"],
        "totalUsers": [95, 100, 99],
    }).to_csv(tmp_path / "ga.csv", index=False)

    config_path = tmp_path / "report.toml"
    config_path.write_text(f"""
start_date = "2024-01-01"
end_date = "2024-01-03"

[platforms.adobe]
kind = "csv"
path = "{(tmp_path / 'adobe.csv').as_posix()}"

[platforms.google]
kind = "csv"
path = "{(tmp_path / 'ga.csv').as_posix()}"

[[metrics]]
label = "UVs"
adobe_field = "metrics/visitors"
google_field = "totalUsers"
""")
    return config_path


def test_cli_runs_report_from_csv_exports(tmp_path, capsys):
    out = tmp_path / "out"
    config_path = _write_csv_config(tmp_path)

    exit_code = main(["--config", str(config_path), "--output-dir", str(out), "--log-level", "WARNING"])

    assert exit_code == 0
    assert os.path.exists(out / "report.md")
    assert os.path.exists(out / "figures" / "UVs_difference_distribution.png")
    assert "Report written to" in capsys.readouterr().out


def test_cli_returns_error_code_on_bad_configuration(tmp_path):
    config_path = _write_csv_config(tmp_path)

    exit_code = main(["--config", str(config_path), "--start-date", "2024-02-01"])

    assert exit_code == 1
