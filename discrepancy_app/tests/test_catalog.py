import pytest
from discrepancy_app.core.exceptions import ConfigurationError
from discrepancy_app.metric_catalog.catalog_models import MetricCatalog, MetricSpec, Platform
from discrepancy_app.metric_catalog.catalog_parser import parse_metric_catalog_toml
from discrepancy_app.metric_catalog.catalog_service import CatalogService


def test_parse_simple_metric_catalog():
    toml_str = """
    [[metrics]]
    label = "UVs"
    description = "Unique visitors"
    adobe_field = "metrics/visitors"
    google_field = "totalUsers"

    [[metrics]]
    label = "Orders"
    source_field_a = "metrics/orders"
    source_field_b = "ecommercePurchases"
    """

    catalog = parse_metric_catalog_toml(toml_str)

    service = CatalogService()
    service.load_catalog(catalog)
    assert service.validate_catalog() is True

    # Order is preserved
    assert catalog.get_labels() == ["UVs", "Orders"]
    assert catalog.fields_for(Platform.A) == ["metrics/visitors", "metrics/orders"]
    assert catalog.fields_for(Platform.B) == ["totalUsers", "ecommercePurchases"]

    uvs = service.get_metric_by_label("UVs")
    assert uvs.description == "Unique visitors"
    assert uvs.source_field(Platform.A) == "metrics/visitors"

    orders = service.get_metric_by_label("Orders")
    assert orders.description is None


def test_parse_metric_without_field_fails():
    toml_str = """
    [[metrics]]
    label = "UVs"
    adobe_field = "metrics/visitors"
    """
    with pytest.raises(ConfigurationError):
        parse_metric_catalog_toml(toml_str)


def test_parse_invalid_toml_fails():
    with pytest.raises(ConfigurationError):
        parse_metric_catalog_toml("[[metrics]\nlabel = ")


@pytest.mark.parametrize("label", ["Unique Visitors", "UVs\t", "UVs\n", "page-views", "", "rev$"])
def test_labels_with_whitespace_or_symbols_are_rejected(label):
    service = CatalogService()
    service.load_catalog(MetricCatalog(metrics=[MetricSpec(label, "a", "b")]))
    with pytest.raises(ConfigurationError):
        service.validate_catalog()


def test_duplicate_labels_are_rejected():
    service = CatalogService()
    service.load_catalog(MetricCatalog(metrics=[
        MetricSpec("UVs", "metrics/visitors", "totalUsers"),
        MetricSpec("UVs", "metrics/uniquevisitors", "activeUsers"),
    ]))
    with pytest.raises(ConfigurationError, match="Duplicate"):
        service.validate_catalog()


def test_labels_whose_columns_overlap_are_rejected():
    service = CatalogService()
    service.load_catalog(MetricCatalog(metrics=[
        MetricSpec("Orders", "metrics/orders", "ecommercePurchases"),
        MetricSpec("Orders_pct", "metrics/ordersPct", "purchaseRate"),
    ]))
    with pytest.raises(ConfigurationError, match="Orders_pct_diff"):
        service.validate_catalog()


def test_empty_catalog_and_blank_fields_are_rejected():
    service = CatalogService()
    service.load_catalog(MetricCatalog())
    with pytest.raises(ConfigurationError):
        service.validate_catalog()

    service.load_catalog(MetricCatalog(metrics=[MetricSpec("UVs", " ", "totalUsers")]))
    with pytest.raises(ConfigurationError):
        service.validate_catalog()


def test_unknown_label_lookup():
    service = CatalogService()
    service.load_catalog(MetricCatalog(metrics=[MetricSpec("UVs", "metrics/visitors", "totalUsers")]))
    with pytest.raises(ConfigurationError):
        service.get_metric_by_label("Orders")
