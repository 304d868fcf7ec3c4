from partyroom import db
from partyroom.directory import create_player, join_room
from partyroom.models import RoomPlayer
from partyroom.services.games import scheduler, start_quiz, submit_answer
from partyroom.services.games.scoring import PASS_SCORE
from partyroom.services.games.sessions import QuizSessionState, QuizStage, sessions
from conftest import QUESTIONS

PER_QUESTION = ['phase:LOADING', 'questionData', 'phase:THINK', 'phase:ANSWER', 'phase:RESULT']


def _labels(events):
    return [f"{name}:{payload['type']}" if name == 'phase' else name for _, name, payload in events]


def _phases(events, phase_type):
    return [payload for _, name, payload in events if name == 'phase' and payload['type'] == phase_type]


def _answer_during_think(monkeypatch, flask_app, code, choose):
    """Patch the scheduler wait so `choose(question_index)` is submitted during every THINK phase."""
    def _wait(seconds):
        with sessions.acquire(code, create=False) as entry:
            stage, index = entry.quiz.stage, entry.quiz.question_index
        if stage == QuizStage.THINK:
            chosen = choose(index)
            if chosen is not None:
                submit_answer(flask_app, code, chosen)
    monkeypatch.setattr(scheduler, '_wait', _wait)


def test_full_phase_sequence(flask_app, make_room, published):
    room, _ = make_room('Alice', 'Bruno')
    result = start_quiz(flask_app, room.code)
    assert result.success

    expected = ['phase:LOADING', 'gameStart'] + PER_QUESTION * len(QUESTIONS) + ['quizEnd']
    assert _labels(published) == expected
    assert all(code == room.code for code, _, _ in published)


def test_phase_payloads(flask_app, make_room, published):
    room, (alice, bruno) = make_room('Alice', 'Bruno')
    start_quiz(flask_app, room.code)

    intro = published[0][2]
    assert intro['type'] == 'LOADING'
    assert 'questionIndex' not in intro
    assert isinstance(intro['startTime'], int)

    question_data = [payload for _, name, payload in published if name == 'questionData']
    assert question_data[0] == {
        'questionText': QUESTIONS[0].question_text,
        'imageUrl': QUESTIONS[0].image_url,
        'answers': list(QUESTIONS[0].answers),
    }
    assert all('correctIndex' not in q for q in question_data)

    think = _phases(published, 'THINK')
    assert [p['questionIndex'] for p in think] == list(range(len(QUESTIONS)))

    answer = _phases(published, 'ANSWER')[1]
    assert answer['activePlayerId'] == bruno.id
    assert answer['activePlayerName'] == 'Bruno'

    results = _phases(published, 'RESULT')
    assert [p['correctIndex'] for p in results] == [q.correct_index for q in QUESTIONS]


def test_phase_durations_come_from_config(flask_app, make_room, published, monkeypatch):
    flask_app.config['THINK_DURATION_MS'] = 1234
    flask_app.config['ANSWER_DURATION_MS'] = 4321
    waits = []
    monkeypatch.setattr(scheduler, '_wait', waits.append)
    room, _ = make_room('Alice')
    start_quiz(flask_app, room.code)

    assert {p['duration'] for p in _phases(published, 'THINK')} == {1234}
    assert {p['duration'] for p in _phases(published, 'ANSWER')} == {4321}
    assert waits.count(1.234) == len(QUESTIONS)
    assert waits.count(4.321) == len(QUESTIONS)


def test_responder_is_round_robin_over_roster(flask_app, make_room, published, monkeypatch):
    room, players = make_room('Alice', 'Bruno', 'Chloe')
    # Answers must not influence who responds
    _answer_during_think(monkeypatch, flask_app, room.code, lambda i: 0)
    start_quiz(flask_app, room.code)

    responders = [p['activePlayerId'] for p in _phases(published, 'ANSWER')]
    assert responders == [players[i % 3].id for i in range(len(QUESTIONS))]


def test_roster_is_snapshotted_at_start(flask_app, make_room, published, monkeypatch):
    room, (alice,) = make_room('Alice')
    late = create_player('Late', 'Joiner')

    def _wait(seconds):
        join_room(late, room)
    monkeypatch.setattr(scheduler, '_wait', _wait)
    start_quiz(flask_app, room.code)

    assert {p['activePlayerId'] for p in _phases(published, 'ANSWER')} == {alice.id}


def test_quiz_end_success_at_pass_score(flask_app, make_room, published, monkeypatch):
    room, _ = make_room('Alice', 'Bruno')
    # Correct on the first four questions, wrong on the last
    _answer_during_think(
        monkeypatch, flask_app, room.code,
        lambda i: QUESTIONS[i].correct_index if i < PASS_SCORE else (QUESTIONS[i].correct_index + 1) % 4,
    )
    start_quiz(flask_app, room.code)

    ends = [payload for _, name, payload in published if name == 'quizEnd']
    assert ends == [{'score': 4, 'success': True}]


def test_quiz_end_failure_below_pass_score(flask_app, make_room, published, monkeypatch):
    room, _ = make_room('Alice')
    _answer_during_think(
        monkeypatch, flask_app, room.code,
        lambda i: QUESTIONS[i].correct_index if i < PASS_SCORE - 1 else None,
    )
    start_quiz(flask_app, room.code)

    ends = [payload for _, name, payload in published if name == 'quizEnd']
    assert ends == [{'score': 3, 'success': False}]


def test_answer_results_are_broadcast(flask_app, make_room, published, monkeypatch):
    room, _ = make_room('Alice')
    _answer_during_think(monkeypatch, flask_app, room.code, lambda i: 1)
    start_quiz(flask_app, room.code)

    results = [payload for _, name, payload in published if name == 'answerResult']
    assert results == [{'correctIndex': q.correct_index, 'chosenIndex': 1} for q in QUESTIONS]
    # Each answerResult lands inside the THINK window of its question
    labels = _labels(published)
    first = labels.index('answerResult')
    assert labels[first - 1] == 'phase:THINK'
    assert labels[first + 1] == 'phase:ANSWER'


def _active_quiz(code, players, question_index=0, stage=QuizStage.THINK):
    with sessions.acquire(code) as entry:
        entry.quiz = QuizSessionState(
            generation=sessions.next_generation(),
            players=list(players),
            questions=list(QUESTIONS),
            question_index=question_index,
            stage=stage,
        )


def test_repeated_correct_answers_each_score(flask_app, published):
    # No deduplication: every correct submission for the same question adds a point
    _active_quiz('ROOM1', [])
    correct = QUESTIONS[0].correct_index
    first = submit_answer(flask_app, 'room1', correct)
    second = submit_answer(flask_app, 'ROOM1', correct)
    wrong = submit_answer(flask_app, 'ROOM1', correct + 1)

    assert first.data['correct'] and second.data['correct']
    assert not wrong.data['correct']
    assert sessions.snapshot('ROOM1')['quiz']['score'] == 2
    assert [name for _, name, _ in published] == ['answerResult'] * 3


def test_answer_scored_against_current_question(flask_app, published):
    # A late submission is matched to whatever question is current when applied
    _active_quiz('ROOM2', [], question_index=2, stage=QuizStage.RESULT)
    result = submit_answer(flask_app, 'ROOM2', QUESTIONS[2].correct_index)
    assert result.data == {'correct': True, 'questionIndex': 2}
    assert published[0][2] == {'correctIndex': QUESTIONS[2].correct_index, 'chosenIndex': QUESTIONS[2].correct_index}


def test_answer_without_session_is_ignored(flask_app, published):
    result = submit_answer(flask_app, 'NOPE1', 0)
    assert not result.success
    assert result.reason.value == 'no_active_quiz'
    assert published == []
    assert 'NOPE1' not in sessions


def test_answer_after_quiz_end_is_ignored(flask_app, make_room, published):
    room, _ = make_room('Alice')
    start_quiz(flask_app, room.code)
    published.clear()

    result = submit_answer(flask_app, room.code, 0)
    assert result.reason.value == 'no_active_quiz'
    assert published == []


def test_start_unknown_room(flask_app, published):
    result = start_quiz(flask_app, 'NOPE1')
    assert not result.success
    assert result.reason.value == 'room_not_found'
    assert published == []


def test_start_room_without_members(flask_app, make_room, published):
    room, _ = make_room('Alice')
    RoomPlayer.query.filter_by(room_id=room.id).delete()
    db.session.commit()

    result = start_quiz(flask_app, room.code)
    assert not result.success
    assert result.reason.value == 'no_players'
    assert published == []
    assert sessions.snapshot(room.code) is None


def test_empty_question_list(flask_app, make_room, published):
    flask_app.config['QUIZ_QUESTIONS'] = ()
    room, _ = make_room('Alice')
    start_quiz(flask_app, room.code)
    assert _labels(published) == ['phase:LOADING', 'gameStart', 'quizEnd']
    assert published[-1][2] == {'score': 0, 'success': False}


def test_restart_silences_previous_generation(flask_app, make_room, published, monkeypatch):
    room, _ = make_room('Alice', 'Bruno')
    calls = []

    def _wait(seconds):
        calls.append(seconds)
        # Restart from inside the first run's intro wait
        if len(calls) == 1:
            start_quiz(flask_app, room.code)
    monkeypatch.setattr(scheduler, '_wait', _wait)

    start_quiz(flask_app, room.code)

    labels = _labels(published)
    # First run's intro, then the complete second run, then nothing more
    assert labels == ['phase:LOADING'] + ['phase:LOADING', 'gameStart'] + PER_QUESTION * len(QUESTIONS) + ['quizEnd']
    assert labels.count('quizEnd') == 1


def test_restart_mid_question_silences_previous_generation(flask_app, make_room, published, monkeypatch):
    room, _ = make_room('Alice')
    restarted = []

    def _wait(seconds):
        with sessions.acquire(room.code, create=False) as entry:
            stage, index = entry.quiz.stage, entry.quiz.question_index
        if not restarted and stage == QuizStage.THINK and index == 2:
            restarted.append(True)
            start_quiz(flask_app, room.code)
    monkeypatch.setattr(scheduler, '_wait', _wait)

    start_quiz(flask_app, room.code)

    labels = _labels(published)
    assert labels.count('quizEnd') == 1
    assert labels[-1] == 'quizEnd'
    # First run got as far as question 2's THINK, then the second run played in full
    assert labels.count('gameStart') == 2
    assert labels.count('phase:THINK') == 3 + len(QUESTIONS)
    # Nothing from the first run follows the second run's quizEnd
    assert len(labels) == (2 + 5 * 2 + 3) + (3 + 5 * len(QUESTIONS))


def test_discarded_room_stops_driver(flask_app, make_room, published, monkeypatch):
    room, _ = make_room('Alice')

    def _wait(seconds):
        if 'questionData' in _labels(published):
            sessions.discard(room.code)
    monkeypatch.setattr(scheduler, '_wait', _wait)

    start_quiz(flask_app, room.code)
    assert _labels(published) == ['phase:LOADING', 'gameStart', 'phase:LOADING', 'questionData']
