"""
Circuit Pressure Rules

Rule ordering (fixed; every matching rule contributes a line):
    1. Arterial pressure too negative : inflow restriction
    2. Venous pressure too high       : return-line obstruction
    3. TMP too high                   : filter clogging
    4. Pre-filter to venous drop large: filter clotting
"""
from __future__ import annotations

from typing import List, Optional

from ..risk import PA_LOW, PV_HIGH, TMP_HIGH, PRESSURE_DROP_HIGH
from .base import Advisory, AdvisoryContext, AdvisorySeverity, fmt

NORMAL_TEXT = "Pressures within normal range."


def rule_arterial_low(ctx: AdvisoryContext) -> Optional[Advisory]:
    if not ctx.risks.arterial_pressure_low:
        return None
    return Advisory(
        rule_id="PRS-ART-001",
        text=(
            f"PA arterial pressure too low ({fmt(ctx.params.p_arterial)} < {PA_LOW} mmHg). "
            "Suggests restricted inflow from the access."
        ),
    )


def rule_venous_high(ctx: AdvisoryContext) -> Optional[Advisory]:
    if not ctx.risks.venous_pressure_high:
        return None
    return Advisory(
        rule_id="PRS-VEN-001",
        text=(
            f"PV venous pressure too high ({fmt(ctx.params.p_venous)} > {PV_HIGH} mmHg). "
            "Suggests obstruction of the return line."
        ),
    )


def rule_tmp_high(ctx: AdvisoryContext) -> Optional[Advisory]:
    if not ctx.risks.tmp_high:
        return None
    return Advisory(
        rule_id="PRS-TMP-001",
        text=(
            f"TMP too high ({fmt(ctx.params.tmp)} > {TMP_HIGH} mmHg). "
            "Suggests the filter is clogging."
        ),
    )


def rule_pressure_drop(ctx: AdvisoryContext) -> Optional[Advisory]:
    if not ctx.risks.pressure_drop_high:
        return None
    return Advisory(
        rule_id="PRS-DROP-001",
        text=(
            f"ΔP filter pressure drop too large ({fmt(ctx.risks.pressure_drop)} mmHg, "
            f"> {PRESSURE_DROP_HIGH}). Suggests clotting in the filter."
        ),
        severity=AdvisorySeverity.CRITICAL,
    )


PRESSURE_RULES = [
    rule_arterial_low,
    rule_venous_high,
    rule_tmp_high,
    rule_pressure_drop,
]


def normal_pressure() -> List[Advisory]:
    return [Advisory(rule_id="PRS-NORMAL", text=NORMAL_TEXT, severity=AdvisorySeverity.INFO)]
