"""
Clinical Core

Parameter model, derived quantities, risk classification, advisory rules
and the diagram part registry. Everything here is pure and synchronous.

Usage:
    from crrt_advisor.core import CircuitSession

    session = CircuitSession()
    session.set_parameter("dilution", "Post")
    print(session.get_advisories())
"""
from .parameters import (
    AnticoagulationMode,
    CircuitParameters,
    DilutionMode,
    PARAMETER_SPECS,
    TreatmentMode,
)
from .calculator import CITRATE_DOSE_PRESETS, DerivedQuantities, derive
from .risk import RiskFlags, RiskLevel, classify
from .diagram import DiagramPart, PART_IDS, build_parts
from .session import CircuitSession, CircuitState, compute_state

__all__ = [
    "AnticoagulationMode",
    "CircuitParameters",
    "DilutionMode",
    "PARAMETER_SPECS",
    "TreatmentMode",
    "CITRATE_DOSE_PRESETS",
    "DerivedQuantities",
    "derive",
    "RiskFlags",
    "RiskLevel",
    "classify",
    "DiagramPart",
    "PART_IDS",
    "build_parts",
    "CircuitSession",
    "CircuitState",
    "compute_state",
]
