"""
Derived Quantity Calculator

Pure functions turning a CircuitParameters snapshot into the derived
physiological quantities used by the classifier and advisory rules.

Constants:
    HCT            0.30          fixed haematocrit
    CITRATE_CONC   136 mmol/L    4% trisodium citrate
    CALCIUM_CONC   0.225 mmol/mL calcium infusion solution

Zero denominators are replaced by a floor (1 for flow-based doses and the
filtration-fraction denominator, 0.01 for the calcium ratio) so that every
result stays finite for any input.
"""
from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Dict, List

from .parameters import CircuitParameters, DilutionMode, TreatmentMode

# ── Constants ─────────────────────────────────────────────────────────────────

HCT = 0.30
CITRATE_CONC = 136.0      # mmol/L
CALCIUM_CONC = 0.225      # mmol/mL

FLOW_FLOOR = 1.0
ION_CA_FLOOR = 0.01

CITRATE_DOSE_PRESETS: List[float] = [2.8, 3.0, 3.2]   # mmol/L blood


def _nonzero(value: float, floor: float) -> float:
    return value if value != 0 else floor


# ── Individual quantities ─────────────────────────────────────────────────────

def plasma_flow(qb: float) -> float:
    """Plasma flow in mL/h from blood flow in mL/min."""
    return qb * (1 - HCT) * 60


def blood_flow_lph(qb: float) -> float:
    return qb * 60 / 1000


def filtration_fraction(params: CircuitParameters) -> float:
    """
    Filtration fraction as a ratio (not percent).

    Post-dilution filters undiluted plasma; pre-dilution adds the
    replacement flow to the plasma entering the filter.
    """
    convective = params.q_rep + params.net_uf
    qp = plasma_flow(params.qb)
    if params.dilution == DilutionMode.POST:
        denominator = qp
    else:
        denominator = qp + params.q_rep
    return convective / _nonzero(denominator, FLOW_FLOOR)


def total_effluent(params: CircuitParameters) -> float:
    """Effluent in mL/h; dialysate only counts in CVVHDF."""
    dialysate = params.q_d if params.mode == TreatmentMode.CVVHDF else 0
    return params.q_rep + params.net_uf + dialysate


def citrate_dose(citrate_flow: float, qb: float) -> float:
    """Citrate delivered per litre of blood (mmol/L)."""
    citrate_mmol_h = citrate_flow / 1000 * CITRATE_CONC
    return citrate_mmol_h / _nonzero(blood_flow_lph(qb), FLOW_FLOOR)


def calcium_dose(calcium_flow: float, effluent_ml_h: float) -> float:
    """Calcium replaced per litre of effluent (mmol/L)."""
    return (calcium_flow * CALCIUM_CONC) / _nonzero(effluent_ml_h / 1000, FLOW_FLOOR)


def calcium_ratio(params: CircuitParameters) -> float:
    """Total / ionized calcium; 0 when no total calcium was drawn."""
    if not params.has_total_ca:
        return 0.0
    return params.total_ca / _nonzero(params.peripheral_ca, ION_CA_FLOOR)


def citrate_flow_for_dose(target_dose: float, qb: float) -> int:
    """Citrate pump rate (mL/h, whole number) that delivers target_dose."""
    return round(target_dose * blood_flow_lph(qb) * 1000 / CITRATE_CONC)


# ── Aggregate ─────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class DerivedQuantities:
    plasma_flow: float          # mL/h
    total_convective: float     # mL/h
    filtration_fraction: float  # ratio
    ff_percent: float           # one decimal, matches display
    total_effluent: float       # mL/h
    blood_flow_lph: float       # L/h
    citrate_dose: float         # mmol/L blood
    calcium_dose: float         # mmol/L effluent
    calcium_ratio: float

    @property
    def ff_display(self) -> str:
        return f"{self.ff_percent:.1f}%"

    def to_dict(self) -> Dict[str, float]:
        data = asdict(self)
        data["ff_display"] = self.ff_display
        return data


def derive(params: CircuitParameters) -> DerivedQuantities:
    """Recompute every derived quantity from one snapshot."""
    ff = filtration_fraction(params)
    effluent = total_effluent(params)
    return DerivedQuantities(
        plasma_flow=plasma_flow(params.qb),
        total_convective=params.q_rep + params.net_uf,
        filtration_fraction=ff,
        ff_percent=round(ff * 100, 1),
        total_effluent=effluent,
        blood_flow_lph=blood_flow_lph(params.qb),
        citrate_dose=citrate_dose(params.citrate_flow, params.qb),
        calcium_dose=calcium_dose(params.calcium_flow, effluent),
        calcium_ratio=calcium_ratio(params),
    )
