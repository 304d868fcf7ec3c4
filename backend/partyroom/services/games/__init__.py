"""Game domain services: the quiz phase scheduler, answer scoring, the
turn-order puzzle and the in-memory session store they share.

HTTP routes and socket handlers import from here, keeping transport
concerns separated from core game mechanics.
"""

from .puzzle import start_puzzle, validate_scan
from .results import Reason, Result
from .scheduler import start_quiz
from .scoring import submit_answer
from .sessions import sessions

__all__ = [
    'Reason',
    'Result',
    'sessions',
    'start_puzzle',
    'start_quiz',
    'submit_answer',
    'validate_scan',
]
