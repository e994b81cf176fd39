import os

from dotenv import load_dotenv

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

load_dotenv(os.path.join(BASE_DIR, ".env"))


def env_flag(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "logistics-dev-secret")
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", f"sqlite:///{os.path.join(BASE_DIR, 'packages.sqlite3')}"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    HOST = os.environ.get("HOST", "0.0.0.0")
    PORT = int(os.environ.get("PORT", 6769))

    LOG_DIR = os.environ.get("LOG_DIR", os.path.join(BASE_DIR, "logs"))
    LOG_TO_FILE = env_flag("LOG_TO_FILE", True)

    # Off by default: payment confirmation and notify overwrite any status.
    STRICT_TRANSITIONS = env_flag("STRICT_TRANSITIONS", False)
    TRACKING_NUMBER_ATTEMPTS = int(os.environ.get("TRACKING_NUMBER_ATTEMPTS", 5))


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    LOG_TO_FILE = False
    STRICT_TRANSITIONS = False
