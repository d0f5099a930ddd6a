"""Heritage guide chat with per-conversation history."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..domain.categories import format_historical_context
from ..domain.errors import RequestValidationError
from ..domain.ids import generate_id
from ..domain.models import ChatMessage
from ..ports.narrative import NarrativePort
from ..ports.reasoning import ReasoningModelPort
from ..ports.sessions import SessionStorePort

MAX_MESSAGE_CHARS = 10000

HERITAGE_TERMS = (
    "temple", "monument", "palace", "castle", "fort", "ruins",
    "heritage", "historical", "ancient", "cultural", "unesco",
    "pyramid", "tomb", "mosque", "church", "cathedral", "shrine",
    "museum", "artifact", "archaeology", "tradition", "festival",
)

LANDMARKS = (
    "taj mahal", "colosseum", "machu picchu", "great wall", "pyramids of giza",
    "qutub minar", "red fort", "hampi", "angkor wat", "petra", "acropolis",
)

_WORD_RE = re.compile(r"[a-z]+")


def extract_keywords(message: str) -> Dict[str, List[str]]:
    """Heritage terms and known landmarks mentioned in ``message``."""
    text = message.lower()
    words = set(_WORD_RE.findall(text))
    terms = [t for t in HERITAGE_TERMS if t in words or f"{t}s" in words]
    landmarks = [name for name in LANDMARKS if name in text]
    return {"terms": terms, "landmarks": landmarks}


@dataclass
class ChatService:
    """Chat with the heritage guide model.

    History lives in the injected session store and is capped at the
    newest ``max_messages`` entries. Landmarks named in a message are
    looked up in the narrative source and handed to the model as context.

    Attributes:
        reasoning: Model used to answer
        sessions: Conversation store
        narrative: Optional lookup used to build context
        max_messages: History length kept per conversation
        max_context_lookups: Narrative lookups per message
    """

    reasoning: ReasoningModelPort
    sessions: SessionStorePort
    narrative: Optional[NarrativePort] = None
    max_messages: int = 20
    max_context_lookups: int = 2

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def send(self, message: str, conversation_id: Optional[str] = None) -> Dict[str, Any]:
        """Answer ``message`` within a conversation, creating one if needed.

        Raises:
            RequestValidationError: If the message is empty or too long.
            GenerationError: If the model is unavailable.
        """
        content = (message or "").strip()
        if not content:
            raise RequestValidationError(
                "Message is required", field_errors={"message": "must not be empty"}
            )
        if len(content) > MAX_MESSAGE_CHARS:
            raise RequestValidationError(
                "Message is too long",
                field_errors={"message": f"must not exceed {MAX_MESSAGE_CHARS} characters"},
            )

        conversation_id = conversation_id or generate_id("conv")
        user_message = ChatMessage(role="user", content=content)
        prompt = [*self.sessions.get(conversation_id), user_message][-self.max_messages :]

        # The model call runs unlocked; the exchange is appended as one unit
        reply = self.reasoning.chat(prompt, context=self._context(content)).strip()
        history = self.sessions.append(
            conversation_id,
            [user_message, ChatMessage(role="assistant", content=reply)],
            self.max_messages,
        )

        self._logger.info(
            "Chat reply sent",
            extra={"conversation_id": conversation_id, "history": len(history)},
        )
        return {
            "conversation_id": conversation_id,
            "reply": reply,
            "history_length": len(history),
        }

    def history(self, conversation_id: str) -> List[ChatMessage]:
        return self.sessions.get(conversation_id)

    def clear(self, conversation_id: str) -> bool:
        return self.sessions.evict(conversation_id)

    def _context(self, message: str) -> Optional[Dict[str, Any]]:
        keywords = extract_keywords(message)
        if not keywords["terms"] and not keywords["landmarks"]:
            return None

        context: Dict[str, Any] = {"keywords": keywords["terms"] + keywords["landmarks"]}
        if self.narrative is None:
            return context

        sites = []
        for landmark in keywords["landmarks"][: self.max_context_lookups]:
            summary = self.narrative.summarize(landmark.title())
            if summary.found:
                sites.append(
                    {
                        "name": summary.title,
                        "summary": format_historical_context(summary.summary, 400),
                    }
                )
        if sites:
            context["relevant_sites"] = sites
        return context
