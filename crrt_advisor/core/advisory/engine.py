"""
Advisory Engine

Central dispatcher. Evaluates the pressure and clinical rule tables, in
table order, against one parameter snapshot.

Usage:
    from crrt_advisor.core.advisory import AdvisoryEngine

    report = AdvisoryEngine().analyze(params)
    print(report.pressure_text)
    print(report.clinical_text, report.is_warning)

Adding a rule:
    1. Write rule_<name>(AdvisoryContext) -> Optional[Advisory] in the
       matching rules_<section>.py.
    2. Insert it into that module's rule list at the position its line
       should appear.
"""
from __future__ import annotations

import logging
from typing import Callable, List, Optional

from ..calculator import DerivedQuantities, derive
from ..parameters import CircuitParameters
from ..risk import RiskFlags, classify
from .base import Advisory, AdvisoryContext, AdvisoryReport
from .rules_clinical import CLINICAL_RULES, normal_clinical
from .rules_pressure import PRESSURE_RULES, normal_pressure

logger = logging.getLogger(__name__)

Rule = Callable[[AdvisoryContext], Optional[Advisory]]


def _evaluate(rules: List[Rule], ctx: AdvisoryContext) -> List[Advisory]:
    advisories = []
    for rule in rules:
        advisory = rule(ctx)
        if advisory is not None:
            advisories.append(advisory)
    return advisories


class AdvisoryEngine:
    """
    Turns a CircuitParameters snapshot into an AdvisoryReport.

    Stateless; every call recomputes from scratch.
    """

    def __init__(
        self,
        pressure_rules: Optional[List[Rule]] = None,
        clinical_rules: Optional[List[Rule]] = None,
    ):
        self.pressure_rules = list(PRESSURE_RULES if pressure_rules is None else pressure_rules)
        self.clinical_rules = list(CLINICAL_RULES if clinical_rules is None else clinical_rules)

    def analyze(
        self,
        params: CircuitParameters,
        derived: Optional[DerivedQuantities] = None,
        risks: Optional[RiskFlags] = None,
    ) -> AdvisoryReport:
        """
        Evaluate both rule tables.

        Args:
            params: Current parameter snapshot.
            derived: Precomputed derived quantities, recomputed if omitted.
            risks: Precomputed risk flags, recomputed if omitted.

        Returns:
            AdvisoryReport whose sections each hold at least one line:
            the fired rules, or the single normal-range message.
        """
        if derived is None:
            derived = derive(params)
        if risks is None:
            risks = classify(params, derived)
        ctx = AdvisoryContext(params=params, derived=derived, risks=risks)

        pressure = _evaluate(self.pressure_rules, ctx)
        clinical = _evaluate(self.clinical_rules, ctx)

        fired = [a.rule_id for a in pressure + clinical]
        if fired:
            logger.info(f"AdvisoryEngine: {len(fired)} advisory line(s): " + ", ".join(fired))
        else:
            logger.debug("AdvisoryEngine: all parameters in range")

        return AdvisoryReport(
            pressure=pressure or normal_pressure(),
            clinical=clinical or normal_clinical(),
        )
