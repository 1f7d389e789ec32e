import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


def _opt_str(v: str | None) -> str | None:
    s = (v or "").strip()
    return s or None


@dataclass(frozen=True)
class Settings:
    bot_token: str
    db_host: str
    db_port: int
    db_name: str
    db_user: str
    db_password: str
    default_program_slug: str
    log_level: str
    units_seed_path: str | None


def get_settings() -> Settings:
    token = os.getenv("BOT_TOKEN", "").strip()
    if not token:
        raise ValueError("BOT_TOKEN is required")
    return Settings(
        bot_token=token,
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_name=os.getenv("DB_NAME", "wellness"),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        default_program_slug=(os.getenv("DEFAULT_PROGRAM_SLUG", "reset-7").strip().lower() or "reset-7"),
        log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO",
        units_seed_path=_opt_str(os.getenv("UNITS_SEED_PATH")),
    )
