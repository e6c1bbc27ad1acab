"""
Circuit Session

Holds the current parameter snapshot and the state computed from it. Every
mutation recomputes derived quantities, risk flags, advisories and diagram
parts in one synchronous pass, so readers never observe a partial state.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .advisory import AdvisoryEngine, AdvisoryReport
from .calculator import (
    CITRATE_CONC,
    CITRATE_DOSE_PRESETS,
    DerivedQuantities,
    blood_flow_lph,
    citrate_flow_for_dose,
    derive,
)
from .diagram import DiagramPart, build_parts, parts_list, resolve_query
from .parameters import MAX_MAGNITUDE, CircuitParameters
from .risk import RiskFlags, classify
from crrt_advisor.utils import ParameterValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CircuitState:
    """Everything computed from one parameter snapshot."""
    version: int
    params: CircuitParameters
    derived: DerivedQuantities
    risks: RiskFlags
    advisories: AdvisoryReport
    parts: Dict[str, DiagramPart]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "parameters": self.params.to_dict(),
            "derived": self.derived.to_dict(),
            "risks": self.risks.to_dict(),
            "advisories": self.advisories.to_dict(),
            "parts": [p.to_dict() for p in parts_list(self.parts)],
        }


def compute_state(
    params: CircuitParameters,
    version: int = 0,
    engine: Optional[AdvisoryEngine] = None,
) -> CircuitState:
    derived = derive(params)
    risks = classify(params, derived)
    advisories = (engine or AdvisoryEngine()).analyze(params, derived, risks)
    return CircuitState(
        version=version,
        params=params,
        derived=derived,
        risks=risks,
        advisories=advisories,
        parts=build_parts(params, derived, risks),
    )


class CircuitSession:
    """
    Inbound interface used by the presentation layer.

    Not persisted; one session lives as long as its owner keeps it.
    """

    def __init__(
        self,
        params: Optional[CircuitParameters] = None,
        engine: Optional[AdvisoryEngine] = None,
    ):
        self._engine = engine or AdvisoryEngine()
        self._state = compute_state(params or CircuitParameters(), 0, self._engine)

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def version(self) -> int:
        return self._state.version

    @property
    def params(self) -> CircuitParameters:
        return self._state.params

    def _commit(self, params: CircuitParameters) -> CircuitState:
        self._state = compute_state(params, self._state.version + 1, self._engine)
        return self._state

    def set_parameter(self, field_name: str, value: Any) -> CircuitState:
        """
        Update one field and recompute.

        Raises:
            ParameterValidationError: the value was rejected; state unchanged.
        """
        params = self._state.params.with_value(field_name, value)
        logger.debug(f"CircuitSession: {field_name} = {value!r}")
        return self._commit(params)

    def set_parameters(self, values: Dict[str, Any]) -> CircuitState:
        """Apply several fields at once; all or nothing."""
        params = self._state.params
        for field_name, value in values.items():
            params = params.with_value(field_name, value)
        return self._commit(params)

    def set_citrate_dose(self, target_dose: float) -> CircuitState:
        """
        Set the citrate pump to the rate delivering target_dose mmol/L blood.

        Raises:
            ParameterValidationError: the target is not a finite number, or
                the resulting pump rate is out of bounds; state unchanged.
        """
        if isinstance(target_dose, bool) or not isinstance(target_dose, (int, float)):
            raise ParameterValidationError(
                f"target dose expects a number, got {target_dose!r}",
                field_name="citrate_flow",
                details={"presets": CITRATE_DOSE_PRESETS},
            )
        non_finite = isinstance(target_dose, float) and not math.isfinite(target_dose)
        if non_finite or abs(target_dose) > MAX_MAGNITUDE:
            raise ParameterValidationError(
                f"target dose must be a finite, bounded number, got {target_dose!r}",
                field_name="citrate_flow",
                details={"presets": CITRATE_DOSE_PRESETS},
            )

        rate = target_dose * blood_flow_lph(self._state.params.qb) * 1000 / CITRATE_CONC
        if not math.isfinite(rate) or abs(rate) > MAX_MAGNITUDE:
            raise ParameterValidationError(
                f"target dose {target_dose!r} gives an out-of-bounds citrate flow",
                field_name="citrate_flow",
                details={"max_magnitude": MAX_MAGNITUDE},
            )
        flow = citrate_flow_for_dose(target_dose, self._state.params.qb)
        return self.set_parameter("citrate_flow", flow)

    def get_diagram_parts(self) -> List[DiagramPart]:
        return parts_list(self._state.parts)

    def get_advisories(self) -> Dict[str, Any]:
        report = self._state.advisories
        return {
            "pressure": report.pressure_text,
            "clinical": report.clinical_text,
            "is_warning": report.is_warning,
        }

    def on_part_activated(self, identifier: str) -> str:
        """Query string to forward to the explanation service."""
        return resolve_query(self._state.parts, identifier)

    def is_current(self, version: int) -> bool:
        """False once a newer recomputation has replaced ``version``."""
        return version == self._state.version

    def snapshot(self) -> Dict[str, Any]:
        return self._state.to_dict()
