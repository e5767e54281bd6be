import logging
import os
import sys
from dotenv import load_dotenv


load_dotenv()  # pick up LOG_LEVEL / CSV_URL etc. from a local .env

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def _level_from_env() -> str:
    level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    return level if level in VALID_LOG_LEVELS else "INFO"


LOG_LEVEL = _level_from_env()

# package logger only; the host app's root logger is left alone
_root = logging.getLogger("comp_directory")
_root.setLevel(getattr(logging, LOG_LEVEL))
if not _root.handlers:
    _handler = logging.StreamHandler(sys.stdout)
    _handler.setFormatter(logging.Formatter(LOG_FORMAT))
    _root.addHandler(_handler)


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the package namespace, e.g. comp_directory.ingest."""
    short = name.split(".")[-1]
    return _root.getChild(short)
