class DiscrepancyError(ValueError):
    """Base class for errors raised while building a discrepancy report."""


class ConfigurationError(DiscrepancyError):
    """The metric catalog or report configuration is malformed."""


class SchemaError(DiscrepancyError):
    """An input series is missing a field the catalog expects, or is malformed."""


class EmptyDataError(DiscrepancyError):
    """No overlapping non-null data exists for a metric."""


class SourceFetchError(DiscrepancyError):
    """A source fetcher could not retrieve or parse its platform's response."""
