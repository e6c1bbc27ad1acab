"""
Diagram Part Registry

Plain-data snapshot of the nine clickable circuit parts. Each part carries a
live description, the question to ask when it is clicked, and a risk level
taken from the classifier; any renderer can consume it.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

from .calculator import DerivedQuantities
from .parameters import AnticoagulationMode, CircuitParameters, TreatmentMode
from .risk import RiskFlags, RiskLevel
from crrt_advisor.utils import UnknownPartError

PART_IDS = [
    "filter",
    "blood_pump",
    "venous_chamber",
    "vascular_access",
    "replacement_line",
    "effluent",
    "dialysate_line",
    "anticoagulant_pump",
    "calcium_pump",
]


@dataclass(frozen=True)
class DiagramPart:
    identifier: str
    label: str
    description: str
    query: str
    risk_level: RiskLevel = RiskLevel.NONE

    @property
    def is_risk(self) -> bool:
        return self.risk_level != RiskLevel.NONE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "identifier": self.identifier,
            "label": self.label,
            "description": self.description,
            "query": self.query,
            "is_risk": self.is_risk,
            "risk_level": self.risk_level.value,
        }


def _filter(params: CircuitParameters, risks: RiskFlags) -> DiagramPart:
    if risks.tmp_high:
        query = "What does an excessively high TMP mean?"
    elif risks.ff_high:
        query = "How does a high filtration fraction cause clotting?"
    elif risks.pressure_drop_high:
        query = "Why does a large pressure drop across the filter indicate clotting?"
    else:
        query = "How does clotting develop in the hollow fibres of the filter?"

    if risks.tmp_high or risks.ff_high or risks.pressure_drop_high:
        level = RiskLevel.HIGH
    elif risks.ff_warning:
        level = RiskLevel.WARNING
    else:
        level = RiskLevel.NONE

    return DiagramPart("filter", "Filter", f"TMP: {params.tmp:g}", query, level)


def _blood_pump(params: CircuitParameters, risks: RiskFlags) -> DiagramPart:
    if risks.low_blood_flow:
        query = "Why does a low blood flow rate increase circuit clotting?"
        level = RiskLevel.WARNING
    else:
        query = "What is the risk of haemolysis caused by the blood pump?"
        level = RiskLevel.NONE
    return DiagramPart("blood_pump", "Blood Pump", f"{params.qb:g} ml/min", query, level)


def _anticoagulant_description(params: CircuitParameters) -> str:
    mode = params.anticoagulation
    if mode == AnticoagulationMode.HEPARIN:
        return f"Heparin {params.heparin_rate:g} U/h"
    if mode == AnticoagulationMode.CITRATE_CA:
        return f"Citrate {params.citrate_flow:g} ml/h"
    if mode == AnticoagulationMode.NAFAMOSTAT:
        return f"Nafamostat {params.nafamostat_dose:g} mg/h"
    return "Off"


def build_parts(
    params: CircuitParameters,
    derived: DerivedQuantities,
    risks: RiskFlags,
) -> Dict[str, DiagramPart]:
    """Rebuild every part, keyed by identifier in PART_IDS order."""
    dialysate_desc = f"Qd: {params.q_d:g}"
    if params.mode != TreatmentMode.CVVHDF:
        dialysate_desc += " (off in CVVH)"

    parts = [
        _filter(params, risks),
        _blood_pump(params, risks),
        DiagramPart(
            "venous_chamber", "Venous Chamber", f"PV: {params.p_venous:g}",
            "How does the venous chamber fluid level relate to clotting?",
            RiskLevel.WARNING if risks.venous_pressure_high else RiskLevel.NONE,
        ),
        DiagramPart(
            "vascular_access", "Vascular Access", f"PA: {params.p_arterial:g}",
            "How does the arterial-venous pressure difference affect circuit life?",
            RiskLevel.WARNING if risks.arterial_pressure_low else RiskLevel.NONE,
        ),
        DiagramPart(
            "replacement_line", "Replacement Fluid", f"Qrep: {params.q_rep:g}",
            "How do pre-dilution and post-dilution differ in their effect on clotting?",
        ),
        DiagramPart(
            "effluent", "Effluent", f"Out: {derived.total_effluent:g} ml/h",
            "What does an abnormal effluent colour indicate?",
        ),
        DiagramPart(
            "dialysate_line", "Dialysate", dialysate_desc,
            "How should the dialysate temperature be set?",
        ),
        DiagramPart(
            "anticoagulant_pump", "Anticoagulant Pump", _anticoagulant_description(params),
            "Where should the anticoagulant be infused into the circuit?",
        ),
        DiagramPart(
            "calcium_pump", "Calcium Pump", f"Ca++ {params.calcium_flow:g} ml/h",
            "Why does the calcium return position matter?",
        ),
    ]
    return {part.identifier: part for part in parts}


def resolve_query(parts: Dict[str, DiagramPart], identifier: str) -> str:
    """Query string for a clicked part."""
    part = parts.get(identifier)
    if part is None:
        raise UnknownPartError(f"Unknown circuit part: {identifier}", identifier=identifier)
    return part.query


def parts_list(parts: Dict[str, DiagramPart]) -> List[DiagramPart]:
    return [parts[i] for i in PART_IDS if i in parts]
