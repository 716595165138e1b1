# config.py
import os
import logging
from pathlib import Path
from dotenv import load_dotenv, find_dotenv

log = logging.getLogger(__name__)

# ---------- 1) .env локальный ----------
load_dotenv(find_dotenv(usecwd=True))

# ---------- 2) .env из Secret Files ----------
SECRETS_DIR  = os.getenv("SECRETS_DIR", "/etc/secrets")
SECRETS_FILE = os.getenv("SECRETS_FILE", "")  # путь к .env (по желанию)

def _load_env_file(path: Path):
    if path.exists():
        load_dotenv(path, override=True)

if SECRETS_FILE:
    _load_env_file(Path(SECRETS_FILE))
else:
    d = Path(SECRETS_DIR)
    if d.is_dir():
        for name in (".env", "env", "secrets.env"):
            _load_env_file(d / name)

def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        log.warning("%s=%r is not an integer, using %s", name, raw, default)
        return default

# ---------- Достаём значения ----------
TELEGRAM_TOKEN = os.getenv("TELEGRAM_TOKEN", "").strip()

# Markov
MARKOV_WORDS     = _int_env("MARKOV_WORDS", 20)
MARKOV_MAX_CHARS = _int_env("MARKOV_MAX_CHARS", 300)

# Runtime
LOG_LEVEL    = os.getenv("LOG_LEVEL", "INFO").upper()
PORT         = _int_env("PORT", 10000)
DISABLE_HTTP = os.getenv("DISABLE_HTTP", "0") == "1"

# DB
DB_PATH = os.getenv("DB_PATH", "chains.sqlite")
