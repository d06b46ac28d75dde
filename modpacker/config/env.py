"""Bootstrap configuration read from the process environment.

These values are resolved once at import time and are needed before the
tool settings file is loaded (where to look for it, where to log, how long
an external tool may run).
"""

import os
import sys
from pathlib import Path


def string_to_bool(s: str) -> bool:
    return s.lower() in ["true", "yes", "1", "y"]


def _program_dir() -> Path:
    return Path(sys.argv[0]).resolve().parent if sys.argv and sys.argv[0] else Path.cwd()


CONFIG_DIR = Path(os.getenv("MODPACKER_CONFIG_DIR", str(_program_dir())))
LOG_DIR = Path(os.getenv("MODPACKER_LOG_DIR", str(CONFIG_DIR / "logs")))

DEBUG = string_to_bool(os.getenv("DEBUG", "false"))
LOG_LEVEL = "DEBUG" if DEBUG else os.getenv("LOG_LEVEL", "INFO").upper()
ENABLE_LOGGING = string_to_bool(os.getenv("ENABLE_LOGGING", "false"))

# Seconds an external tool may run before it is killed
TOOL_TIMEOUT = int(os.getenv("MODPACKER_TOOL_TIMEOUT", "300"))
MAX_WORKERS = max(1, int(os.getenv("MODPACKER_MAX_WORKERS", "1")))
