"""
Clinical Parameter Model

One immutable snapshot of every circuit and lab input. Updating a field
produces a new snapshot. Clinical values are not range-checked, since
abnormal readings are exactly what the risk classifier is meant to flag;
only magnitudes no instrument could report are rejected.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Dict, Optional, Type

from crrt_advisor.utils import ParameterValidationError


class TreatmentMode(str, Enum):
    """CVVH is convective only; CVVHDF adds a dialysate path."""
    CVVH   = "CVVH"
    CVVHDF = "CVVHDF"


class DilutionMode(str, Enum):
    """Where replacement fluid enters relative to the filter."""
    PRE  = "Pre"
    POST = "Post"


class AnticoagulationMode(str, Enum):
    HEPARIN    = "Heparin"
    CITRATE_CA = "CitrateCa"
    NAFAMOSTAT = "Nafamostat"
    NONE       = "None"


@dataclass(frozen=True)
class CircuitParameters:
    """Current values of all inputs. Units follow the bedside machine."""

    # ── Modes ─────────────────────────────────────────────────────────────
    mode: TreatmentMode = TreatmentMode.CVVH
    dilution: DilutionMode = DilutionMode.PRE
    anticoagulation: AnticoagulationMode = AnticoagulationMode.HEPARIN

    # ── Flows ─────────────────────────────────────────────────────────────
    qb: float = 200          # mL/min
    q_rep: float = 1500      # mL/h
    q_d: float = 1000        # mL/h, CVVHDF only
    net_uf: float = 100      # mL/h

    # ── Pressures (mmHg) ──────────────────────────────────────────────────
    p_arterial: float = -80
    p_venous: float = 80
    p_pre_filter: float = 140
    tmp: float = 30

    # ── Heparin ───────────────────────────────────────────────────────────
    heparin_rate: float = 500    # U/h
    aptt: float = 45             # s

    # ── Regional citrate anticoagulation ──────────────────────────────────
    citrate_flow: float = 140    # mL/h of 4% sodium citrate
    calcium_flow: float = 40     # mL/h
    post_filter_ca: float = 0.35  # mmol/L ionized
    peripheral_ca: float = 1.10   # mmol/L ionized
    has_total_ca: bool = True
    total_ca: float = 2.25        # mmol/L

    # ── Nafamostat ────────────────────────────────────────────────────────
    nafamostat_dose: float = 20  # mg/h
    act: float = 150             # s

    # ── Blood gas / metabolic ─────────────────────────────────────────────
    ph: float = 7.35
    po2: float = 90
    pco2: float = 40
    be: float = 0
    hco3: float = 24.0
    lactate: float = 1.2

    def with_value(self, field_name: str, value: Any) -> "CircuitParameters":
        """Return a copy with one field replaced, after coercing its type."""
        return replace(self, **{field_name: coerce_value(field_name, value)})

    def to_dict(self) -> Dict[str, Any]:
        return {
            f.name: (getattr(self, f.name).value
                     if isinstance(getattr(self, f.name), Enum)
                     else getattr(self, f.name))
            for f in fields(self)
        }


@dataclass(frozen=True)
class ParameterSpec:
    """Presentation metadata for one input; ranges are hints, never enforced."""
    name: str
    unit: str = ""
    enum: Optional[Type[Enum]] = None
    is_flag: bool = False
    ui_min: Optional[float] = None
    ui_max: Optional[float] = None
    ui_step: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        if self.enum is not None:
            kind = "enum"
        elif self.is_flag:
            kind = "flag"
        else:
            kind = "numeric"
        return {
            "name": self.name,
            "kind": kind,
            "unit": self.unit,
            "choices": [m.value for m in self.enum] if self.enum else None,
            "ui_min": self.ui_min,
            "ui_max": self.ui_max,
            "ui_step": self.ui_step,
            "default": _default_of(self.name),
        }


# Largest accepted magnitude. Abnormal readings pass, but values this far out
# are input errors and would overflow the derived flows to infinity.
MAX_MAGNITUDE = 1e9


PARAMETER_SPECS: Dict[str, ParameterSpec] = {
    spec.name: spec for spec in [
        ParameterSpec("mode", enum=TreatmentMode),
        ParameterSpec("dilution", enum=DilutionMode),
        ParameterSpec("anticoagulation", enum=AnticoagulationMode),
        ParameterSpec("qb", "mL/min", ui_min=100, ui_max=400, ui_step=10),
        ParameterSpec("q_rep", "mL/h", ui_min=0, ui_max=4000, ui_step=100),
        ParameterSpec("q_d", "mL/h", ui_min=0, ui_max=4000, ui_step=100),
        ParameterSpec("net_uf", "mL/h", ui_min=0, ui_max=500, ui_step=10),
        ParameterSpec("p_arterial", "mmHg", ui_step=1),
        ParameterSpec("p_venous", "mmHg", ui_step=1),
        ParameterSpec("p_pre_filter", "mmHg", ui_step=1),
        ParameterSpec("tmp", "mmHg", ui_step=1),
        ParameterSpec("heparin_rate", "U/h", ui_step=50),
        ParameterSpec("aptt", "s", ui_step=1),
        ParameterSpec("citrate_flow", "mL/h", ui_step=1),
        ParameterSpec("calcium_flow", "mL/h", ui_step=1),
        ParameterSpec("post_filter_ca", "mmol/L", ui_step=0.01),
        ParameterSpec("peripheral_ca", "mmol/L", ui_step=0.01),
        ParameterSpec("has_total_ca", is_flag=True),
        ParameterSpec("total_ca", "mmol/L", ui_step=0.01),
        ParameterSpec("nafamostat_dose", "mg/h", ui_step=1),
        ParameterSpec("act", "s", ui_step=1),
        ParameterSpec("ph", "", ui_step=0.01),
        ParameterSpec("po2", "mmHg", ui_step=1),
        ParameterSpec("pco2", "mmHg", ui_step=1),
        ParameterSpec("be", "mmol/L", ui_step=1),
        ParameterSpec("hco3", "mmol/L", ui_step=0.1),
        ParameterSpec("lactate", "mmol/L", ui_step=0.1),
    ]
}


def _default_of(field_name: str) -> Any:
    value = getattr(CircuitParameters(), field_name)
    return value.value if isinstance(value, Enum) else value


def coerce_value(field_name: str, value: Any) -> Any:
    """
    Convert a raw value into the field's type.

    Raises:
        ParameterValidationError: unknown field, unknown enum variant,
            a numeric field given something that is not a finite number,
            or a number beyond MAX_MAGNITUDE.
    """
    spec = PARAMETER_SPECS.get(field_name)
    if spec is None:
        raise ParameterValidationError(
            f"Unknown parameter: {field_name}",
            field_name=field_name,
            details={"valid": sorted(PARAMETER_SPECS)},
        )

    if spec.enum is not None:
        if isinstance(value, spec.enum):
            return value
        try:
            return spec.enum(value)
        except ValueError:
            raise ParameterValidationError(
                f"Invalid value {value!r} for {field_name}",
                field_name=field_name,
                details={"valid": [m.value for m in spec.enum]},
            )

    if spec.is_flag:
        if isinstance(value, bool):
            return value
        raise ParameterValidationError(
            f"{field_name} expects true/false, got {value!r}",
            field_name=field_name,
        )

    # bool is an int subclass; a flag sent to a numeric field is a client bug
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ParameterValidationError(
            f"{field_name} expects a number, got {value!r}",
            field_name=field_name,
        )
    if isinstance(value, float) and not math.isfinite(value):
        raise ParameterValidationError(
            f"{field_name} must be finite, got {value!r}",
            field_name=field_name,
        )
    if abs(value) > MAX_MAGNITUDE:
        raise ParameterValidationError(
            f"{field_name} is out of bounds, got {value!r}",
            field_name=field_name,
            details={"max_magnitude": MAX_MAGNITUDE},
        )
    return value
