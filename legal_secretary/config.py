"""
Configuration, constants, and service initialization.
"""

import os
import logging
from pathlib import Path

from dotenv import load_dotenv
import google.generativeai as genai

# --- LOAD ENV ---
load_dotenv()

# --- LOGGING ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger("legal_secretary")


def log_event(level: int, message: str, **data):
    """Lightweight structured logging helper."""
    try:
        serialized = " | ".join(f"{k}={v}" for k, v in data.items())
        logger.log(level, f"{message}{' | ' + serialized if serialized else ''}")
    except Exception:
        logger.log(level, message)


# --- PATHS ---
DATA_DIR = Path(os.getenv("DATA_DIR", Path(__file__).resolve().parent.parent / "data"))

# --- STORAGE KEYS ---
TEMPLATES_KEY = "legal_templates"
VERSION_KEY = "legal_app_version"
CLOUD_CONFIG_KEY = "legal_cloud_config"

# --- CONSTANTS ---
DEFAULT_VERSION = "1.0.0"
RESET_VERSION = "1.0.1"
SYNC_DEBOUNCE_SECONDS = float(os.getenv("SYNC_DEBOUNCE_SECONDS", "2.0"))
SYNC_TIMEOUT = float(os.getenv("SYNC_TIMEOUT", "30.0"))
BUILD_VERSION = os.getenv("BUILD_VERSION", "Dev")
BACKUP_FILENAME_PREFIX = "legal_secretary_backup_Vr_"

HOST = os.getenv("HOST", "127.0.0.1")
PORT = int(os.getenv("PORT", "5000"))

# --- API KEYS ---
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")

# --- INITIALIZE SERVICES ---

# Gemini for template analysis and drafting
gemini_model = None
if GEMINI_API_KEY:
    genai.configure(api_key=GEMINI_API_KEY)
    gemini_model = genai.GenerativeModel(GEMINI_MODEL)
