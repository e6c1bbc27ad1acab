"""
Explanation Service

Bridges the clinical core and the chat collaborator: resolves clicked parts
to questions and fetches narrative answers. Answers are returned as-is
(already Markdown); nothing here parses or validates them, and a failure
leaves every circuit session untouched.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from crrt_advisor import config
from crrt_advisor.core.llm import GeminiClient
from crrt_advisor.core.session import CircuitSession
from crrt_advisor.utils import get_logger

logger = get_logger(__name__)

EMPTY_RESPONSE_TEXT = "I apologize, I couldn't generate a response at this time."

RETRY_MESSAGE = (
    "Sorry, something went wrong while answering your question. "
    "Please check your network connection and try again."
)

WELCOME_MESSAGE = (
    "Hello! I am your blood purification assistant.\n\n"
    "The interactive circuit diagram shows a CRRT circuit. **Click a component** "
    "(such as the filter or blood pump) and I will explain why clotting tends to "
    "happen there and how to prevent it.\n\n"
    "You can also type a question directly."
)

SUGGESTED_QUESTIONS: List[Dict[str, str]] = [
    {"id": "1", "text": "Why do blood purification circuits clog so easily?"},
    {"id": "2", "text": "How can clotting in the dialysis circuit be prevented?"},
    {"id": "3", "text": "What is biocompatibility in an extracorporeal circuit?"},
    {"id": "4", "text": "What is the difference between heparin and sodium citrate anticoagulation?"},
]


@dataclass
class PartExplanation:
    """Answer for a clicked part, tagged with the state it was asked about."""
    identifier: str
    query: str
    text: str
    version: int
    is_current: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "identifier": self.identifier,
            "query": self.query,
            "text": self.text,
            "version": self.version,
            "is_current": self.is_current,
        }


class AdvisoryExplainer:
    """Free-text explanation lookup backed by Gemini."""

    def __init__(self, client: Optional[GeminiClient] = None, language: Optional[str] = None):
        self.client = client or GeminiClient()
        self.language = language or config.RESPONSE_LANGUAGE

    @property
    def system_instruction(self) -> str:
        return config.SYSTEM_PROMPT.format(language=self.language)

    async def explain_query(self, query: str) -> str:
        """
        Narrative answer for a natural-language question.

        Raises:
            AdvisoryServiceError: propagated unchanged from the client.
        """
        response = await self.client.generate_async(query, system_instruction=self.system_instruction)
        return response.text or EMPTY_RESPONSE_TEXT

    async def explain_part(self, session: CircuitSession, identifier: str) -> PartExplanation:
        """
        Resolve a clicked part and explain it.

        The session keeps changing while the request is in flight; the result
        records which version it answered so a newer state always wins.
        """
        version = session.version
        query = session.on_part_activated(identifier)
        logger.info(f"Explaining part '{identifier}' at version {version}")
        text = await self.explain_query(query)
        return PartExplanation(
            identifier=identifier,
            query=query,
            text=text,
            version=version,
            is_current=session.is_current(version),
        )
