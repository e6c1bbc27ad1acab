"""
Advisory Engine - Base Types

Every rule produces at most one Advisory carrying its own severity, so the
presentation layer styles warnings from structured data rather than by
searching the message text.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

from ..calculator import DerivedQuantities
from ..parameters import CircuitParameters
from ..risk import RiskFlags


class AdvisorySeverity(str, Enum):
    """
    INFO      – normal-range or informational line
    WARNING   – needs a bedside adjustment
    CRITICAL  – clotting or citrate-accumulation danger
    """
    INFO     = "info"
    WARNING  = "warning"
    CRITICAL = "critical"


@dataclass(frozen=True)
class AdvisoryContext:
    """Everything a rule may read; built once per recomputation."""
    params: CircuitParameters
    derived: DerivedQuantities
    risks: RiskFlags


@dataclass(frozen=True)
class Advisory:
    rule_id: str            # e.g. "PRS-TMP-001"
    text: str
    severity: AdvisorySeverity = AdvisorySeverity.WARNING

    @property
    def is_warning(self) -> bool:
        return self.severity != AdvisorySeverity.INFO

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rule_id": self.rule_id,
            "text": self.text,
            "severity": self.severity.value,
        }


@dataclass(frozen=True)
class AdvisoryReport:
    """Ordered advisory lines for the pressure and clinical panels."""
    pressure: List[Advisory] = field(default_factory=list)
    clinical: List[Advisory] = field(default_factory=list)

    @property
    def pressure_text(self) -> str:
        return "\n".join(a.text for a in self.pressure)

    @property
    def clinical_text(self) -> str:
        return "\n".join(a.text for a in self.clinical)

    @property
    def pressure_warning(self) -> bool:
        return any(a.is_warning for a in self.pressure)

    @property
    def clinical_warning(self) -> bool:
        return any(a.is_warning for a in self.clinical)

    @property
    def is_warning(self) -> bool:
        return self.pressure_warning or self.clinical_warning

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pressure": self.pressure_text,
            "clinical": self.clinical_text,
            "is_warning": self.is_warning,
            "pressure_warning": self.pressure_warning,
            "clinical_warning": self.clinical_warning,
            "items": {
                "pressure": [a.to_dict() for a in self.pressure],
                "clinical": [a.to_dict() for a in self.clinical],
            },
        }


def fmt(value: float) -> str:
    """Render a reading the way it was entered: 7.3, 150, 0.45."""
    return f"{value:g}"
