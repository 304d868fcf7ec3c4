from partyroom import broadcast
from partyroom.directory import normalize_code
from partyroom.events import AnswerResultEvent
from .results import Reason, Result
from .sessions import QuizStage, sessions

# Fixed pass mark, independent of how many questions the quiz has
PASS_SCORE = 4


def quiz_passed(score: int) -> bool:
    return score >= PASS_SCORE


def submit_answer(app, room_code: str, chosen_index) -> Result:
    """Score an answer against the room's current question.

    The answer is matched to whichever question is current when it is applied,
    so a submission arriving after THINK ends still counts. There is no
    per-player deduplication: every correct submission adds one point.
    Rooms without a running quiz ignore the submission.
    """
    code = normalize_code(room_code)
    with sessions.acquire(code, create=False) as entry:
        quiz = entry.quiz if entry else None
        if quiz is None or quiz.stage == QuizStage.DONE or quiz.current_question is None:
            return Result.fail(Reason.NO_ACTIVE_QUIZ, 'No quiz in progress')

        question = quiz.current_question
        correct = chosen_index == question.correct_index
        if correct:
            quiz.score += 1
        broadcast.publish(code, AnswerResultEvent(correct_index=question.correct_index, chosen_index=chosen_index))
        index, score = quiz.question_index, quiz.score

    app.logger.info(f"[quiz-answer] room={code} question={index} chosen={chosen_index} correct={correct} score={score}")
    return Result.ok('Answer recorded', correct=correct, questionIndex=index)
