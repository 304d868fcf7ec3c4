"""Typed payloads for every event broadcast to a room.

Each event class carries its wire name in ``name`` and serialises to the
camelCase field names clients rely on. Optional fields left as ``None`` are
omitted from the payload.
"""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional


def _camel(name: str) -> str:
    head, *rest = name.split('_')
    return head + ''.join(part.capitalize() for part in rest)


class PhaseType(str, Enum):
    LOADING = 'LOADING'
    THINK = 'THINK'
    ANSWER = 'ANSWER'
    RESULT = 'RESULT'


class Event:
    name: ClassVar[str]

    def to_dict(self) -> Dict[str, Any]:
        payload = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, (list, tuple)):
                value = list(value)
            payload[_camel(f.name)] = value
        return payload


@dataclass(frozen=True)
class PhaseEvent(Event):
    name: ClassVar[str] = 'phase'
    type: PhaseType
    duration: int
    start_time: int
    question_index: Optional[int] = None
    active_player_id: Optional[int] = None
    active_player_name: Optional[str] = None
    correct_index: Optional[int] = None


@dataclass(frozen=True)
class GameStartEvent(Event):
    name: ClassVar[str] = 'gameStart'


@dataclass(frozen=True)
class QuestionDataEvent(Event):
    name: ClassVar[str] = 'questionData'
    question_text: str
    image_url: str
    answers: List[str]


@dataclass(frozen=True)
class AnswerResultEvent(Event):
    name: ClassVar[str] = 'answerResult'
    correct_index: int
    chosen_index: Any


@dataclass(frozen=True)
class QuizEndEvent(Event):
    name: ClassVar[str] = 'quizEnd'
    score: int
    success: bool


@dataclass(frozen=True)
class Game2StartEvent(Event):
    name: ClassVar[str] = 'game2Start'
    next_player_id: int
    next_player_name: str
    hint: str
    progress: int
    total: int
    found: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class Game2ProgressEvent(Event):
    name: ClassVar[str] = 'game2Progress'
    found: List[str]
    progress: int
    total: int
    next_player_id: int
    next_player_name: str
    hint: str


@dataclass(frozen=True)
class Game2CompleteEvent(Event):
    name: ClassVar[str] = 'game2Complete'
    found: List[str]
    total: int
