import os


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    PROJECT_NAME: str = "imagequiz"
    DEBUG: bool = _env_flag("DEBUG")
    LOG_DIR: str = os.environ.get("LOG_DIR", "log")
    LOG_FILE: str = "imagequiz.log"
    LOG_TO_DB: bool = _env_flag("LOG_TO_DB")
    DB_DIR: str = os.environ.get("DB_DIR", "db")
    DB_FILE: str = "imagequiz.db"
    UPLOAD_DIR: str = os.environ.get("UPLOAD_DIR", "uploads")
    SEED_DIR: str = os.environ.get("SEED_DIR", "seed_images")
    TEMPLATE_DIR: str = os.path.join(os.path.dirname(__file__), "templates")
    SESSION_COOKIE_NAME: str = "quiz_session_id"
    SESSION_TIMEOUT_MINUTES: int = int(os.environ.get("SESSION_TIMEOUT_MINUTES", 120))
    JWT_SECRET: str = os.environ.get("JWT_SECRET", "")
    JWT_ALG: str = os.environ.get("JWT_ALG", "HS256")
    JWT_EXPIRE_MINUTES: int = int(os.environ.get("JWT_EXPIRE_MINUTES", 60))
    MIN_PASSWORD_LENGTH: int = 8
    ADMIN_USERNAME: str = os.environ.get("ADMIN_USERNAME", "")
    ADMIN_PASSWORD: str = os.environ.get("ADMIN_PASSWORD", "")
    ROOT_PATH: str = os.environ.get("ROOT_PATH", "")


settings = Settings()
