"""
Anticoagulation, Acid-Base and Metabolic Rules

Rule ordering:
    1. No anticoagulation           : always a clotting warning
    2. Heparin APTT                 : under (< 60 s) or over (> 100 s), exclusive
    3. Regional citrate (four independent checks)
         a. citrate dose < 2.5 mmol/L blood
         b. post-filter iCa > 0.45 mmol/L
         c. peripheral iCa < 0.90 mmol/L
         d. total/ionized calcium ratio > 2.5
    4. Acid-base interpretation      : acidosis / alkalosis / nothing
    5. Lactate > 4 mmol/L            : independent of the pH branch

Anticoagulation rules only fire for the active mode.
"""
from __future__ import annotations

from typing import List, Optional

from ..parameters import AnticoagulationMode
from ..risk import CA_RATIO_HIGH, PH_HIGH, PH_LOW
from .base import Advisory, AdvisoryContext, AdvisorySeverity, fmt

# ── Thresholds ────────────────────────────────────────────────────────────────

APTT_LOW            = 60     # s
APTT_HIGH           = 100    # s
CITRATE_DOSE_LOW    = 2.5    # mmol/L blood
POST_FILTER_CA_HIGH = 0.45   # mmol/L
PERIPHERAL_CA_LOW   = 0.90   # mmol/L
LACTATE_HIGH        = 4.0    # mmol/L

PCO2_ACIDOSIS       = 45     # mmHg
PCO2_ALKALOSIS      = 35     # mmHg
HCO3_LOW            = 22     # mmol/L
HCO3_HIGH           = 26     # mmol/L
BE_LOW              = -3
BE_HIGH             = 3

NORMAL_TEXT = "Parameters within target range."


def _is_citrate(ctx: AdvisoryContext) -> bool:
    return ctx.params.anticoagulation == AnticoagulationMode.CITRATE_CA


# ── Rule 1: No anticoagulation ────────────────────────────────────────────────

def rule_no_anticoagulation(ctx: AdvisoryContext) -> Optional[Advisory]:
    if ctx.params.anticoagulation != AnticoagulationMode.NONE:
        return None
    return Advisory(
        rule_id="ACG-NONE-001",
        text="WARNING: anticoagulant-free mode, high risk of circuit clotting!",
        severity=AdvisorySeverity.CRITICAL,
    )


# ── Rule 2: Heparin titration ─────────────────────────────────────────────────

def rule_heparin_aptt(ctx: AdvisoryContext) -> Optional[Advisory]:
    if ctx.params.anticoagulation != AnticoagulationMode.HEPARIN:
        return None
    aptt = ctx.params.aptt
    if aptt < APTT_LOW:
        return Advisory(
            rule_id="ACG-HEP-001",
            text=f"APTT {fmt(aptt)} s < {APTT_LOW} s. Advice: give a heparin bolus and increase the rate.",
        )
    if aptt > APTT_HIGH:
        return Advisory(
            rule_id="ACG-HEP-002",
            text=f"APTT {fmt(aptt)} s > {APTT_HIGH} s. Advice: pause, then reduce heparin.",
        )
    return None


# ── Rule 3: Regional citrate anticoagulation ─────────────────────────────────

def rule_citrate_dose_low(ctx: AdvisoryContext) -> Optional[Advisory]:
    if not _is_citrate(ctx) or ctx.derived.citrate_dose >= CITRATE_DOSE_LOW:
        return None
    return Advisory(
        rule_id="RCA-DOSE-001",
        text=(
            f"Citrate dose low ({ctx.derived.citrate_dose:.1f} < {CITRATE_DOSE_LOW} mmol/L). "
            "Risk of circuit clotting."
        ),
    )


def rule_post_filter_calcium(ctx: AdvisoryContext) -> Optional[Advisory]:
    if not _is_citrate(ctx) or ctx.params.post_filter_ca <= POST_FILTER_CA_HIGH:
        return None
    return Advisory(
        rule_id="RCA-POSTCA-001",
        text=(
            f"Post-filter iCa {fmt(ctx.params.post_filter_ca)} > {POST_FILTER_CA_HIGH} mmol/L. "
            "Advice: increase citrate flow."
        ),
    )


def rule_peripheral_calcium(ctx: AdvisoryContext) -> Optional[Advisory]:
    if not _is_citrate(ctx) or ctx.params.peripheral_ca >= PERIPHERAL_CA_LOW:
        return None
    return Advisory(
        rule_id="RCA-SYSCA-001",
        text=(
            f"Peripheral iCa {fmt(ctx.params.peripheral_ca)} < {PERIPHERAL_CA_LOW:.2f} mmol/L. "
            "Advice: supplement calcium."
        ),
    )


def rule_calcium_ratio(ctx: AdvisoryContext) -> Optional[Advisory]:
    if not _is_citrate(ctx) or not ctx.risks.calcium_ratio_high:
        return None
    return Advisory(
        rule_id="RCA-RATIO-001",
        text=(
            f"WARNING: total/ionized Ca ratio {ctx.derived.calcium_ratio:.1f} (> {CA_RATIO_HIGH}). "
            "Suspected citrate accumulation!"
        ),
        severity=AdvisorySeverity.CRITICAL,
    )


# ── Rule 4: Acid-base ─────────────────────────────────────────────────────────

def _acidosis(ctx: AdvisoryContext) -> Advisory:
    p = ctx.params
    respiratory = p.pco2 > PCO2_ACIDOSIS
    metabolic = p.hco3 < HCO3_LOW or p.be < BE_LOW

    parts = [f"[Acidosis] pH {fmt(p.ph)}."]
    components = []
    if respiratory:
        components.append(f"Respiratory (pCO2 {fmt(p.pco2)})")
    if metabolic:
        components.append(f"Metabolic (HCO3 {fmt(p.hco3)})")
    if components:
        parts.append(" + ".join(components) + ".")

    severity = AdvisorySeverity.WARNING
    if metabolic:
        if _is_citrate(ctx) and (ctx.risks.calcium_ratio_high or p.lactate > LACTATE_HIGH):
            parts.append(
                "Suspected citrate accumulation. Advice: reduce citrate, increase dialysate."
            )
            severity = AdvisorySeverity.CRITICAL
        else:
            parts.append("Advice: give buffer or adjust the replacement fluid.")
    if respiratory:
        parts.append("Advice: check ventilator settings.")

    return Advisory(rule_id="ABG-ACID-001", text=" ".join(parts), severity=severity)


def _alkalosis(ctx: AdvisoryContext) -> Advisory:
    p = ctx.params
    respiratory = p.pco2 < PCO2_ALKALOSIS
    metabolic = p.hco3 > HCO3_HIGH or p.be > BE_HIGH

    parts = [f"[Alkalosis] pH {fmt(p.ph)}."]
    components = []
    if respiratory:
        components.append(f"Respiratory (pCO2 {fmt(p.pco2)})")
    if metabolic:
        components.append(f"Metabolic (HCO3 {fmt(p.hco3)})")
    if components:
        parts.append(" + ".join(components) + ".")

    if metabolic:
        if _is_citrate(ctx):
            parts.append(
                "Suspected citrate overload. Advice: reduce citrate or blood flow."
            )
        else:
            parts.append("Advice: adjust the replacement fluid formula.")

    return Advisory(rule_id="ABG-ALK-001", text=" ".join(parts))


def rule_acid_base(ctx: AdvisoryContext) -> Optional[Advisory]:
    if ctx.params.ph < PH_LOW:
        return _acidosis(ctx)
    if ctx.params.ph > PH_HIGH:
        return _alkalosis(ctx)
    return None


# ── Rule 5: Lactate ───────────────────────────────────────────────────────────

def rule_high_lactate(ctx: AdvisoryContext) -> Optional[Advisory]:
    if ctx.params.lactate <= LACTATE_HIGH:
        return None
    return Advisory(
        rule_id="MET-LAC-001",
        text=(
            f"[High lactate] Lac {fmt(ctx.params.lactate)} mmol/L. "
            "Use citrate anticoagulation with caution."
        ),
    )


# ── Public interface ───────────────────────────────────────────────────────────

CLINICAL_RULES = [
    rule_no_anticoagulation,
    rule_heparin_aptt,
    rule_citrate_dose_low,
    rule_post_filter_calcium,
    rule_peripheral_calcium,
    rule_calcium_ratio,
    rule_acid_base,
    rule_high_lactate,
]


def normal_clinical() -> List[Advisory]:
    return [Advisory(rule_id="CLN-NORMAL", text=NORMAL_TEXT, severity=AdvisorySeverity.INFO)]
