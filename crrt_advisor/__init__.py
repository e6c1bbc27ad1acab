"""
CRRT Circuit Advisor

Educational CRRT circuit model: derived flows and doses, clotting and
metabolic risk flags, bedside advisories and a clickable part registry.
Not a medical device; advisories do not replace clinical judgment.
"""

__version__ = "1.0.0"
