"""
Services Package - Explanation collaborator
"""
from .explainer import AdvisoryExplainer, PartExplanation

__all__ = ["AdvisoryExplainer", "PartExplanation"]
