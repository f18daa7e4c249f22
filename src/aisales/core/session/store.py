"""In-memory session store: build counters, subscription flag, recent turns."""

from __future__ import annotations

import logging
import threading
import time
import uuid
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Iterable

logger = logging.getLogger(__name__)

SENDER_USER = "user"
SENDER_ADVISOR = "ai"

MAX_CONTEXT_TURNS = 6
MAX_CONTEXT_CHARS = 2000


@dataclass(frozen=True)
class Turn:
    sender: str
    text: str


@dataclass
class Session:
    """One caller's state. Mutate only through SessionStore."""

    session_id: str
    created_at: float
    updated_at: float
    history: deque[Turn]
    builds_used: int = 0
    is_subscribed: bool = False
    last_build: dict[str, Any] | None = None

    def remaining_free_builds(self, free_build_limit: int) -> int | None:
        if self.is_subscribed:
            return None
        return max(free_build_limit - self.builds_used, 0)

    def to_dict(self, free_build_limit: int) -> dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "buildsUsed": self.builds_used,
            "freeBuildLimit": None if self.is_subscribed else free_build_limit,
            "remainingFreeBuilds": self.remaining_free_builds(free_build_limit),
            "isSubscribed": self.is_subscribed,
            "lastBuild": self.last_build,
            "turns": len(self.history),
        }


def _normalize(text: str) -> str:
    return " ".join(text.lower().split())


def flatten_history(
    turns: Iterable[Turn],
    current_prompt: str = "",
    *,
    max_turns: int = MAX_CONTEXT_TURNS,
    max_chars: int = MAX_CONTEXT_CHARS,
) -> str:
    """Render recent turns as ``Label: text`` lines for the live model.

    Keeps the last ``max_turns`` turns. A trailing user turn identical to the
    current prompt is dropped so the prompt is not sent twice.
    """
    selected = [t for t in turns if t.text.strip()][-max_turns:] if max_turns > 0 else []
    prompt = _normalize(current_prompt)
    if prompt and selected and selected[-1].sender == SENDER_USER:
        if _normalize(selected[-1].text) == prompt:
            selected.pop()

    lines = [
        f"{'AI Sales' if t.sender == SENDER_ADVISOR else 'User'}: {t.text.strip()}"
        for t in selected
    ]
    return "\n".join(lines)[:max_chars]


class SessionStore:
    """Thread-safe map of session id to Session."""

    def __init__(self, history_capacity: int = 12) -> None:
        self.history_capacity = history_capacity
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def _create(self, session_id: str | None = None) -> Session:
        now = time.time()
        session = Session(
            session_id=session_id or str(uuid.uuid4()),
            created_at=now,
            updated_at=now,
            history=deque(maxlen=self.history_capacity),
        )
        self._sessions[session.session_id] = session
        logger.debug("Created session %s", session.session_id)
        return session

    def get_or_create(self, session_id: str | None = None) -> Session:
        with self._lock:
            session = self._sessions.get(session_id) if session_id else None
            if session is None:
                session = self._create(session_id)
            session.updated_at = time.time()
            return session

    def get(self, session_id: str) -> Session | None:
        with self._lock:
            return self._sessions.get(session_id)

    def record_turn(self, session_id: str, sender: str, text: str) -> None:
        if not text or not text.strip():
            return
        with self._lock:
            session = self._sessions.get(session_id) or self._create(session_id)
            session.history.append(Turn(sender=sender, text=text.strip()))
            session.updated_at = time.time()

    def record_build(self, session_id: str, build_id: str, summary: str) -> Session:
        with self._lock:
            session = self._sessions.get(session_id) or self._create(session_id)
            session.builds_used += 1
            session.last_build = {
                "id": build_id,
                "createdAt": time.time(),
                "summary": summary,
            }
            session.updated_at = time.time()
            return session

    def set_subscribed(self, session_id: str, subscribed: bool = True) -> Session:
        with self._lock:
            session = self._sessions.get(session_id) or self._create(session_id)
            session.is_subscribed = subscribed
            session.updated_at = time.time()
            return session

    def conversation_context(self, session_id: str, current_prompt: str = "") -> str:
        with self._lock:
            session = self._sessions.get(session_id)
            turns = list(session.history) if session else []
        return flatten_history(turns, current_prompt)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
