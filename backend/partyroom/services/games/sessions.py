"""Process-wide, in-memory game state keyed by room code.

Nothing here is persisted. Every read or write of a room's state goes through
``SessionStore.acquire`` which holds that room's lock for the duration of the
``with`` block, so quiz drivers, answer submissions and scan validations for
one room are serialised while different rooms never contend.
"""

import itertools
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

from partyroom.content import PuzzleItem, QuizQuestion
from partyroom.directory import Member


class QuizStage(str, Enum):
    INTRO = 'INTRO'
    LOADING = 'LOADING'
    QUESTION_SENT = 'QUESTION_SENT'
    THINK = 'THINK'
    ANSWER = 'ANSWER'
    RESULT = 'RESULT'
    DONE = 'DONE'


@dataclass
class QuizSessionState:
    generation: int
    players: List[Member]
    questions: List[QuizQuestion]
    question_index: int = 0
    score: int = 0
    stage: QuizStage = QuizStage.INTRO

    @property
    def current_question(self) -> Optional[QuizQuestion]:
        if 0 <= self.question_index < len(self.questions):
            return self.questions[self.question_index]
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'generation': self.generation,
            'stage': self.stage.value,
            'questionIndex': self.question_index,
            'totalQuestions': len(self.questions),
            'score': self.score,
            'players': [p.to_dict() for p in self.players],
        }


@dataclass
class PuzzleSessionState:
    order: List[Member]
    items: List[PuzzleItem]
    cursor: int = 0
    found: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.items)

    @property
    def complete(self) -> bool:
        return self.cursor >= self.total

    @property
    def expected_player(self) -> Optional[Member]:
        return None if self.complete else self.order[self.cursor]

    @property
    def expected_item(self) -> Optional[PuzzleItem]:
        return None if self.complete else self.items[self.cursor]

    def to_dict(self) -> Dict[str, Any]:
        nxt = self.expected_player
        return {
            'progress': self.cursor,
            'total': self.total,
            'found': list(self.found),
            'complete': self.complete,
            'nextPlayerId': nxt.id if nxt else None,
            'order': [p.id for p in self.order],
        }


@dataclass
class RoomSessions:
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    quiz: Optional[QuizSessionState] = None
    puzzle: Optional[PuzzleSessionState] = None


class SessionStore:
    def __init__(self):
        self._guard = threading.Lock()
        self._rooms: Dict[str, RoomSessions] = {}
        self._generations = itertools.count(1)

    def next_generation(self) -> int:
        """Return a token that is never reused for the lifetime of the process."""
        with self._guard:
            return next(self._generations)

    def _lookup(self, code: str, create: bool) -> Optional[RoomSessions]:
        with self._guard:
            entry = self._rooms.get(code)
            if entry is None and create:
                entry = self._rooms[code] = RoomSessions()
            return entry

    def _is_current(self, code: str, entry: RoomSessions) -> bool:
        with self._guard:
            return self._rooms.get(code) is entry

    @contextmanager
    def acquire(self, room_code: str, create: bool = True) -> Iterator[Optional[RoomSessions]]:
        """Lock and yield a room's sessions.

        With ``create=False`` a room without live state yields ``None`` instead
        of allocating an empty entry.
        """
        code = room_code.upper()
        while True:
            entry = self._lookup(code, create)
            if entry is None:
                yield None
                return
            with entry.lock:
                # The entry may have been discarded while we waited for its lock
                if self._is_current(code, entry):
                    yield entry
                    return

    def snapshot(self, room_code: str) -> Optional[Dict[str, Any]]:
        with self.acquire(room_code, create=False) as entry:
            if entry is None or (entry.quiz is None and entry.puzzle is None):
                return None
            return {
                'roomCode': room_code.upper(),
                'quiz': entry.quiz.to_dict() if entry.quiz else None,
                'puzzle': entry.puzzle.to_dict() if entry.puzzle else None,
            }

    def discard(self, room_code: str) -> bool:
        with self._guard:
            return self._rooms.pop(room_code.upper(), None) is not None

    def clear(self) -> None:
        with self._guard:
            self._rooms.clear()

    def __contains__(self, room_code: str) -> bool:
        with self._guard:
            return room_code.upper() in self._rooms


sessions = SessionStore()
