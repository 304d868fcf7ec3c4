import time
from dataclasses import dataclass
from typing import List, Optional, Tuple

from partyroom import socketio
from partyroom import broadcast
from partyroom.content import QuizQuestion, get_questions
from partyroom.directory import find_room_by_code, list_members, normalize_code
from partyroom.events import (
    GameStartEvent,
    PhaseEvent,
    PhaseType,
    QuestionDataEvent,
    QuizEndEvent,
)
from .results import Reason, Result
from .scoring import quiz_passed
from .sessions import QuizSessionState, QuizStage, sessions


@dataclass(frozen=True)
class PhaseTimings:
    """Phase durations in milliseconds."""
    intro_ms: int
    loading_ms: int
    settle_ms: int
    think_ms: int
    answer_ms: int
    result_ms: int

    @classmethod
    def from_config(cls, cfg) -> 'PhaseTimings':
        return cls(
            intro_ms=int(cfg.get('QUIZ_INTRO_MS', 1500)),
            loading_ms=int(cfg.get('QUESTION_LOADING_MS', 800)),
            settle_ms=int(cfg.get('QUESTION_SETTLE_MS', 50)),
            think_ms=int(cfg.get('THINK_DURATION_MS', 10000)),
            answer_ms=int(cfg.get('ANSWER_DURATION_MS', 20000)),
            result_ms=int(cfg.get('RESULT_DURATION_MS', 5000)),
        )


def _now_ms() -> int:
    return int(time.time() * 1000)


def _wait(seconds: float) -> None:
    socketio.sleep(seconds)


def start_quiz(app, room_code: str) -> Result:
    """Start (or restart) the quiz for a room. Needs an app context.

    - Snapshots the room roster and the question list into a fresh session
    - Tags the session with a new generation; any driver still running for an
      older generation stops at its next step without broadcasting
    - Runs the driver inline in TESTING mode, otherwise as a background task
    """
    code = normalize_code(room_code)
    room = find_room_by_code(code)
    if not room:
        return Result.fail(Reason.ROOM_NOT_FOUND, f'Room {code} not found')
    players = list_members(room.id)
    if not players:
        return Result.fail(Reason.NO_PLAYERS, 'Room has no players')

    questions = get_questions(app)
    timings = PhaseTimings.from_config(app.config)
    generation = sessions.next_generation()
    with sessions.acquire(code) as entry:
        entry.quiz = QuizSessionState(generation=generation, players=list(players), questions=questions)

    app.logger.info(
        f"[quiz-start] room={code} generation={generation} players={len(players)} questions={len(questions)}"
    )

    if app.config.get('TESTING'):
        _drive(app, code, generation, timings, len(questions))
    else:
        socketio.start_background_task(_drive, app, code, generation, timings, len(questions))
    return Result.ok('Quiz started', generation=generation)


def _next_stage(stage: QuizStage, index: int, total: int) -> Tuple[Optional[QuizStage], int]:
    if stage == QuizStage.INTRO:
        return (QuizStage.LOADING, 0) if total else (QuizStage.DONE, 0)
    if stage == QuizStage.LOADING:
        return QuizStage.QUESTION_SENT, index
    if stage == QuizStage.QUESTION_SENT:
        return QuizStage.THINK, index
    if stage == QuizStage.THINK:
        return QuizStage.ANSWER, index
    if stage == QuizStage.ANSWER:
        return QuizStage.RESULT, index
    if stage == QuizStage.RESULT:
        if index + 1 < total:
            return QuizStage.LOADING, index + 1
        return QuizStage.DONE, index
    return None, index


def _enter(app, code: str, generation: int, stage: QuizStage, index: int, timings: PhaseTimings,
           previous: Optional[QuizStage] = None) -> Optional[int]:
    """Enter a stage: publish its events and return the delay (ms) before the next one.

    Returns None when the driver should stop, either because the quiz finished
    or because this generation no longer owns the room's quiz session.
    """
    with sessions.acquire(code, create=False) as entry:
        quiz = entry.quiz if entry else None
        if quiz is None or quiz.generation != generation:
            app.logger.info(f"[quiz-superseded] room={code} generation={generation} stage={stage.value}")
            return None

        quiz.stage = stage
        if previous == QuizStage.INTRO:
            broadcast.publish(code, GameStartEvent())

        if stage == QuizStage.INTRO:
            broadcast.publish(code, PhaseEvent(type=PhaseType.LOADING, duration=timings.intro_ms, start_time=_now_ms()))
            return timings.intro_ms

        if stage == QuizStage.DONE:
            success = quiz_passed(quiz.score)
            broadcast.publish(code, QuizEndEvent(score=quiz.score, success=success))
            app.logger.info(f"[quiz-end] room={code} generation={generation} score={quiz.score} success={success}")
            return None

        quiz.question_index = index
        question: QuizQuestion = quiz.questions[index]

        if stage == QuizStage.LOADING:
            broadcast.publish(code, PhaseEvent(
                type=PhaseType.LOADING,
                question_index=index,
                duration=timings.loading_ms,
                start_time=_now_ms(),
            ))
            return timings.loading_ms

        if stage == QuizStage.QUESTION_SENT:
            broadcast.publish(code, QuestionDataEvent(
                question_text=question.question_text,
                image_url=question.image_url,
                answers=list(question.answers),
            ))
            return timings.settle_ms

        if stage == QuizStage.THINK:
            broadcast.publish(code, PhaseEvent(
                type=PhaseType.THINK,
                question_index=index,
                duration=timings.think_ms,
                start_time=_now_ms(),
            ))
            return timings.think_ms

        if stage == QuizStage.ANSWER:
            responder = responder_for(quiz.players, index)
            broadcast.publish(code, PhaseEvent(
                type=PhaseType.ANSWER,
                question_index=index,
                active_player_id=responder.id,
                active_player_name=responder.first_name,
                duration=timings.answer_ms,
                start_time=_now_ms(),
            ))
            return timings.answer_ms

        # RESULT
        broadcast.publish(code, PhaseEvent(
            type=PhaseType.RESULT,
            question_index=index,
            correct_index=question.correct_index,
            duration=timings.result_ms,
            start_time=_now_ms(),
        ))
        return timings.result_ms


def responder_for(players: List, question_index: int):
    """Round-robin responder: roster[i mod len(roster)]."""
    return players[question_index % len(players)]


def _drive(app, code: str, generation: int, timings: PhaseTimings, total: int) -> None:
    stage: Optional[QuizStage] = QuizStage.INTRO
    previous: Optional[QuizStage] = None
    index = 0
    while stage is not None:
        delay = _enter(app, code, generation, stage, index, timings, previous)
        if delay is None:
            return
        _wait(delay / 1000.0)
        previous = stage
        stage, index = _next_stage(stage, index, total)
