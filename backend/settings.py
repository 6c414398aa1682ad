import os
from pathlib import Path

# Basic settings helper to read environment configuration.

BACKEND_ROOT = Path(__file__).resolve().parent
DEFAULT_SESSION_SECRET = "change-me"


class ConfigError(Exception):
    """Raised when the environment does not describe a runnable app."""


def _as_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return val.lower() in ("1", "true", "yes", "on")


def _as_int(val: str | None, default: int) -> int:
    if val is None or val.strip() == "":
        return default
    try:
        return int(val)
    except ValueError:
        raise ConfigError(f"expected an integer, got {val!r}")


class Settings:
    def __init__(self) -> None:
        self.DB_MODE: str = os.getenv("DB_MODE", "").strip().lower()
        self.SQLITE_PATH: str = os.getenv("SQLITE_PATH", "data/library.db")

        self.PG_HOST: str = os.getenv("PGHOST", "localhost")
        self.PG_PORT: int = _as_int(os.getenv("PGPORT"), 5432)
        self.PG_USER: str = os.getenv("PGUSER", "")
        self.PG_PASSWORD: str = os.getenv("POSTGRES_PASSWORD", "")
        self.PG_DATABASE: str = os.getenv("PGDATABASE", "")

        self.MAIN_APP_USER: str = os.getenv("LEONLIB_MAINAPP_USER", "")

        self.CAPTCHA_SITE_KEY: str = os.getenv("LEONLIB_CAPTCHA_SITE_KEY", "")
        self.CAPTCHA_SECRET_KEY: str = os.getenv("LEONLIB_CAPTCHA_SECRET_KEY", "")

        self.AUTH0_DOMAIN: str = os.getenv("AUTH0_DOMAIN", "")
        self.AUTH0_CLIENT_ID: str = os.getenv("AUTH0_CLIENT_ID", "")
        self.AUTH0_CLIENT_SECRET: str = os.getenv("AUTH0_CLIENT_SECRET", "")
        self.AUTH0_CALLBACK_URL: str = os.getenv("AUTH0_CALLBACK_URL", "")
        self.SESSION_SECRET: str = os.getenv("SESSION_SECRET", DEFAULT_SESSION_SECRET)
        self.SESSION_HTTPS_ONLY: bool = _as_bool(os.getenv("SESSION_HTTPS_ONLY"), False)

        self.TEMPLATE_DIR: str = os.getenv("TEMPLATE_DIR", str(BACKEND_ROOT / "templates"))
        self.ASSETS_DIR: str = os.getenv("ASSETS_DIR", "assets")
        self.LIBRARY_FILE: str = os.getenv("LIBRARY_FILE", "library/books_db.toml")
        self.IMAGES_DIR: str = os.getenv("IMAGES_DIR", "images")

        self.PORT: int = _as_int(os.getenv("PORT"), 8180)
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
        self.MAX_UPLOAD_BYTES: int = _as_int(os.getenv("MAX_UPLOAD_BYTES"), 2 << 20)

    @property
    def postgres_url(self) -> str:
        return (
            f"postgresql+psycopg2://{self.PG_USER}:{self.PG_PASSWORD}"
            f"@{self.PG_HOST}:{self.PG_PORT}/{self.PG_DATABASE}"
        )

    @property
    def captcha_enabled(self) -> bool:
        return bool(self.CAPTCHA_SECRET_KEY)

    def validate(self) -> None:
        """Fail fast when a required variable is missing or left at its default."""
        session_secret = "" if self.SESSION_SECRET == DEFAULT_SESSION_SECRET else self.SESSION_SECRET
        missing = [
            name
            for name, value in (
                ("DB_MODE", self.DB_MODE),
                ("LEONLIB_MAINAPP_USER", self.MAIN_APP_USER),
                ("LEONLIB_CAPTCHA_SITE_KEY", self.CAPTCHA_SITE_KEY),
                ("LEONLIB_CAPTCHA_SECRET_KEY", self.CAPTCHA_SECRET_KEY),
                ("SESSION_SECRET", session_secret),
            )
            if not value
        ]
        if missing:
            raise ConfigError(f"missing required settings: {', '.join(missing)}")


settings = Settings()
