"""
LLM Explanation Module

Uses Gemini to explain circuit mechanics in free text.
The LLM is NON-DECISIONAL: it never computes doses, flags or advisories.
"""
from .gemini_client import GeminiClient, GeminiConfig, GeminiResponse

__all__ = [
    "GeminiClient",
    "GeminiConfig",
    "GeminiResponse",
]
