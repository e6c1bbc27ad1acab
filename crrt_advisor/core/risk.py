"""
Risk Classifier

Maps a parameter snapshot and its derived quantities to independent risk
flags. No predicate suppresses another; the advisory rules and the diagram
registry each read the flags they need.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict

from .calculator import DerivedQuantities
from .parameters import CircuitParameters, DilutionMode

# ── Thresholds ────────────────────────────────────────────────────────────────

FF_WARNING_PCT      = 20     # post-dilution, above this: warning
FF_HIGH_PCT         = 25     # post-dilution, above this: high
FF_EFFICIENCY_PCT   = 20     # pre-dilution, above this: efficiency reduced
QB_LOW              = 150    # mL/min
PV_HIGH             = 150    # mmHg
PA_LOW              = -150   # mmHg
TMP_HIGH            = 200    # mmHg
PRESSURE_DROP_HIGH  = 150    # mmHg, pre-filter minus venous
CA_RATIO_HIGH       = 2.5

PH_LOW              = 7.35
PH_HIGH             = 7.45
LACTATE_ELEVATED    = 2.0    # display highlight only


class RiskLevel(str, Enum):
    NONE    = "none"
    WARNING = "warning"
    HIGH    = "high"


@dataclass(frozen=True)
class RiskFlags:
    ff_risk: RiskLevel
    efficiency_reduced: bool
    low_blood_flow: bool
    venous_pressure_high: bool
    arterial_pressure_low: bool
    tmp_high: bool
    pressure_drop_high: bool
    calcium_ratio_high: bool
    ph_abnormal: bool
    lactate_elevated: bool
    pressure_drop: float

    @property
    def ff_high(self) -> bool:
        return self.ff_risk == RiskLevel.HIGH

    @property
    def ff_warning(self) -> bool:
        return self.ff_risk == RiskLevel.WARNING

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ff_risk": self.ff_risk.value,
            "efficiency_reduced": self.efficiency_reduced,
            "low_blood_flow": self.low_blood_flow,
            "venous_pressure_high": self.venous_pressure_high,
            "arterial_pressure_low": self.arterial_pressure_low,
            "tmp_high": self.tmp_high,
            "pressure_drop_high": self.pressure_drop_high,
            "calcium_ratio_high": self.calcium_ratio_high,
            "ph_abnormal": self.ph_abnormal,
            "lactate_elevated": self.lactate_elevated,
            "pressure_drop": self.pressure_drop,
        }


def filtration_risk(params: CircuitParameters, derived: DerivedQuantities) -> RiskLevel:
    """Clotting risk from filtration fraction; only meaningful post-dilution."""
    if params.dilution != DilutionMode.POST:
        return RiskLevel.NONE
    if derived.ff_percent > FF_HIGH_PCT:
        return RiskLevel.HIGH
    if derived.ff_percent > FF_WARNING_PCT:
        return RiskLevel.WARNING
    return RiskLevel.NONE


def classify(params: CircuitParameters, derived: DerivedQuantities) -> RiskFlags:
    pressure_drop = params.p_pre_filter - params.p_venous
    return RiskFlags(
        ff_risk=filtration_risk(params, derived),
        efficiency_reduced=(
            params.dilution == DilutionMode.PRE
            and derived.ff_percent > FF_EFFICIENCY_PCT
        ),
        low_blood_flow=params.qb < QB_LOW,
        venous_pressure_high=params.p_venous > PV_HIGH,
        arterial_pressure_low=params.p_arterial < PA_LOW,
        tmp_high=params.tmp > TMP_HIGH,
        pressure_drop_high=pressure_drop > PRESSURE_DROP_HIGH,
        calcium_ratio_high=params.has_total_ca and derived.calcium_ratio > CA_RATIO_HIGH,
        ph_abnormal=params.ph < PH_LOW or params.ph > PH_HIGH,
        lactate_elevated=params.lactate > LACTATE_ELEVATED,
        pressure_drop=pressure_drop,
    )
