"""Static game content: quiz questions and scavenger-hunt puzzle items.

Content is configuration, not state. The app factory resolves it once into
``QUIZ_QUESTIONS`` / ``PUZZLE_ITEMS`` on the Flask config so tests and
deployments can inject their own sets.
"""

import json
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple


@dataclass(frozen=True)
class QuizQuestion:
    question_text: str
    image_url: str
    answers: Tuple[str, ...]
    correct_index: int

    def __post_init__(self):
        # Normalise lists coming from JSON so the question stays hashable
        object.__setattr__(self, 'answers', tuple(self.answers))
        if not 0 <= self.correct_index < len(self.answers):
            raise ValueError(
                f"correct_index {self.correct_index} out of range for {len(self.answers)} answers"
            )


@dataclass(frozen=True)
class PuzzleItem:
    token: str
    hint: str


DEFAULT_QUESTIONS: Tuple[QuizQuestion, ...] = (
    QuizQuestion(
        question_text='What is this program (VS Code) used for?',
        image_url='/questions/vscode.png',
        answers=('HTML only', 'Hosting', 'Maintenance', 'Development'),
        correct_index=3,
    ),
    QuizQuestion(
        question_text='Which technology does this logo belong to?',
        image_url='/questions/logohtml.png',
        answers=('Yell5', 'HTML', 'JetBrains', 'SQL'),
        correct_index=1,
    ),
    QuizQuestion(
        question_text='Which technology does this logo belong to?',
        image_url='/questions/logocss.png',
        answers=('CSS', 'Node.js', 'TScript', 'BlueStack'),
        correct_index=0,
    ),
    QuizQuestion(
        question_text='Which technology does this logo belong to?',
        image_url='/questions/logojs.png',
        answers=('JSite', 'Ruby', 'JavaScript', 'PHP'),
        correct_index=2,
    ),
    QuizQuestion(
        question_text='Which technology does this logo belong to?',
        image_url='/questions/logopy.png',
        answers=('Reverze', 'Vercel', 'Snake', 'Python'),
        correct_index=3,
    ),
    QuizQuestion(
        question_text='Where should page content be written?',
        image_url='/questions/code.png',
        answers=('Title', 'html', 'Body', 'Head'),
        correct_index=2,
    ),
)

DEFAULT_PUZZLE_ITEMS: Tuple[PuzzleItem, ...] = (
    PuzzleItem(token='QR-KEYBOARD', hint='Where words begin before they reach the screen.'),
    PuzzleItem(token='QR-COFFEE', hint='The fuel of every late-night deploy.'),
    PuzzleItem(token='QR-PRINTER', hint='It jams exactly when you need it most.'),
    PuzzleItem(token='QR-WHITEBOARD', hint='Plans are drawn here and erased by morning.'),
)


def _read_json(path: str) -> dict:
    with open(path, 'r', encoding='utf-8') as fh:
        return json.load(fh)


def load_questions(path: str) -> Tuple[QuizQuestion, ...]:
    """Load quiz questions from ``{"questions": [{questionText, imageUrl, answers, correctIndex}]}``."""
    data = _read_json(path)
    return tuple(
        QuizQuestion(
            question_text=q['questionText'],
            image_url=q.get('imageUrl', ''),
            answers=q['answers'],
            correct_index=int(q['correctIndex']),
        )
        for q in data.get('questions', [])
    )


def load_puzzle_items(path: str) -> Tuple[PuzzleItem, ...]:
    """Load puzzle items from ``{"items": [{token, hint}]}``."""
    data = _read_json(path)
    return validate_puzzle_items(
        [PuzzleItem(token=str(i['token']), hint=i.get('hint', '')) for i in data.get('items', [])]
    )


def validate_puzzle_items(items: Sequence[PuzzleItem]) -> Tuple[PuzzleItem, ...]:
    if not items:
        raise ValueError('At least one puzzle item is required')
    tokens = [i.token for i in items]
    if len(set(tokens)) != len(tokens):
        raise ValueError('Puzzle item tokens must be unique')
    return tuple(items)


def configure_content(flask_app) -> None:
    """Resolve content into the app config unless the config class already provides it."""
    cfg = flask_app.config
    if cfg.get('QUIZ_QUESTIONS') is None:
        path: Optional[str] = cfg.get('QUIZ_CONTENT_FILE')
        cfg['QUIZ_QUESTIONS'] = load_questions(path) if path else DEFAULT_QUESTIONS
    else:
        cfg['QUIZ_QUESTIONS'] = tuple(cfg['QUIZ_QUESTIONS'])
    if cfg.get('PUZZLE_ITEMS') is None:
        path = cfg.get('PUZZLE_CONTENT_FILE')
        cfg['PUZZLE_ITEMS'] = load_puzzle_items(path) if path else DEFAULT_PUZZLE_ITEMS
    else:
        cfg['PUZZLE_ITEMS'] = validate_puzzle_items(list(cfg['PUZZLE_ITEMS']))


def get_questions(app) -> List[QuizQuestion]:
    return list(app.config['QUIZ_QUESTIONS'])


def get_puzzle_items(app) -> List[PuzzleItem]:
    return list(app.config['PUZZLE_ITEMS'])
