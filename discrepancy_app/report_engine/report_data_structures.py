# discrepancy_app/report_engine/report_data_structures.py

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from discrepancy_app.reconciliation_engine.data_structures import SummaryStats

STATUS_COMPARED = "compared"
STATUS_NO_COMPARISON = "no_comparison"


@dataclass
class ReportSection:
    """
    Represents one metric's section of the report.
    """
    label: str
    title: str
    body: str
    status: str                          # STATUS_COMPARED or STATUS_NO_COMPARISON
    stats: Optional[SummaryStats] = None
    figures: Dict[str, str] = field(default_factory=dict)   # chart kind -> file path

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "title": self.title,
            "body": self.body,
            "status": self.status,
            "stats": self.stats.to_dict() if self.stats else None,
            "figures": dict(self.figures),
        }


@dataclass
class ReportResult:
    report_path: str
    sections: List[ReportSection] = field(default_factory=list)

    @property
    def skipped_labels(self) -> List[str]:
        return [s.label for s in self.sections if s.status == STATUS_NO_COMPARISON]
