import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///partyroom.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Comma separated list, '*' allows any origin
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    ROOM_CODE_LENGTH = int(os.environ.get('ROOM_CODE_LENGTH', '5'))
    # Quiz phase durations (milliseconds)
    QUIZ_INTRO_MS = int(os.environ.get('QUIZ_INTRO_MS', '1500'))
    QUESTION_LOADING_MS = int(os.environ.get('QUESTION_LOADING_MS', '800'))
    QUESTION_SETTLE_MS = int(os.environ.get('QUESTION_SETTLE_MS', '50'))
    THINK_DURATION_MS = int(os.environ.get('THINK_DURATION_MS', '10000'))
    ANSWER_DURATION_MS = int(os.environ.get('ANSWER_DURATION_MS', '20000'))
    RESULT_DURATION_MS = int(os.environ.get('RESULT_DURATION_MS', '5000'))
    # Drop a room's live game state this long after its last subscriber leaves (seconds)
    ROOM_RELEASE_GRACE_SEC = float(os.environ.get('ROOM_RELEASE_GRACE_SEC', '30'))
    # Optional JSON files overriding the built-in quiz questions / puzzle items
    QUIZ_CONTENT_FILE = os.environ.get('QUIZ_CONTENT_FILE')
    PUZZLE_CONTENT_FILE = os.environ.get('PUZZLE_CONTENT_FILE')
