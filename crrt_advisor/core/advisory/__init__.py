"""
Advisory Engine

Ordered predicate → message rules producing structured advisories for the
circuit-pressure panel and the anticoagulation / acid-base panel.

Usage:
    from crrt_advisor.core.advisory import AdvisoryEngine, AdvisoryReport

    report = AdvisoryEngine().analyze(params)
"""
from .engine import AdvisoryEngine
from .base import Advisory, AdvisoryContext, AdvisoryReport, AdvisorySeverity

__all__ = [
    "AdvisoryEngine",
    "Advisory",
    "AdvisoryContext",
    "AdvisoryReport",
    "AdvisorySeverity",
]
