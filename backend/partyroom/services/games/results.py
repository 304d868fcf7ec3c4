from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict


class Reason(str, Enum):
    OK = 'ok'
    ROOM_NOT_FOUND = 'room_not_found'
    NO_PLAYERS = 'no_players'
    NO_ACTIVE_QUIZ = 'no_active_quiz'
    NOT_STARTED = 'not_started'
    ALREADY_COMPLETE = 'already_complete'
    WRONG_ITEM = 'wrong_item'
    NOT_YOUR_TURN = 'not_your_turn'


@dataclass(frozen=True)
class Result:
    """Outcome of a game operation. Failures are values, never exceptions."""
    success: bool
    reason: Reason
    message: str
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, message: str, **data) -> 'Result':
        return cls(True, Reason.OK, message, data)

    @classmethod
    def fail(cls, reason: Reason, message: str, **data) -> 'Result':
        return cls(False, reason, message, data)

    def to_dict(self) -> Dict[str, Any]:
        payload = {'success': self.success, 'reason': self.reason.value, 'message': self.message}
        payload.update(self.data)
        return payload
