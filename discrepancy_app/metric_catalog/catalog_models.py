from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class Platform(Enum):
    """
    The two sides of a comparison. A is the numerator and B the basis
    of every percentage difference.
    """
    A = "a"
    B = "b"


@dataclass(frozen=True)
class MetricSpec:
    """
    A single metric to compare across both platforms.
    """
    label: str              # used to build column names downstream
    source_field_a: str     # e.g. Adobe "metrics/visitors"
    source_field_b: str     # e.g. GA4 "totalUsers"
    description: Optional[str] = None

    def source_field(self, platform: Platform) -> str:
        if platform is Platform.A:
            return self.source_field_a
        return self.source_field_b


@dataclass
class MetricCatalog:
    """
    An ordered container for all metric specs.
    """
    metrics: List[MetricSpec] = field(default_factory=list)

    def get_labels(self) -> List[str]:
        """Returns the list of all labels in catalog order."""
        return [m.label for m in self.metrics]

    def fields_for(self, platform: Platform) -> List[str]:
        """Returns the source field names a fetcher for `platform` must request."""
        return [m.source_field(platform) for m in self.metrics]

    def __iter__(self):
        return iter(self.metrics)

    def __len__(self):
        return len(self.metrics)
