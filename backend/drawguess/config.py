import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev")

    # CORS
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    # Reverse proxy headers
    TRUST_PROXY_HEADERS = os.environ.get("TRUST_PROXY_HEADERS", "1") == "1"

    # Socket.IO (empty picks a platform default in create_app)
    SOCKETIO_ASYNC_MODE = os.environ.get("SOCKETIO_ASYNC_MODE", "").strip()

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Rooms
    ROOM_CODE_LENGTH = int(os.environ.get("ROOM_CODE_LENGTH", "8"))
    MAX_PLAYERS = int(os.environ.get("MAX_PLAYERS", "4"))
    MIN_PLAYERS = int(os.environ.get("MIN_PLAYERS", "2"))

    # Game
    ROUND_DURATION_SEC = int(os.environ.get("ROUND_DURATION_SEC", "60"))
    MAX_ROUNDS = int(os.environ.get("MAX_ROUNDS", "3"))
    DRAWER_POINTS = int(os.environ.get("DRAWER_POINTS", "10"))
    GUESSER_POINTS = int(os.environ.get("GUESSER_POINTS", "15"))
    TICK_INTERVAL_SEC = float(os.environ.get("TICK_INTERVAL_SEC", "1.0"))
    WORD_CHOICES_COUNT = int(os.environ.get("WORD_CHOICES_COUNT", "3"))
