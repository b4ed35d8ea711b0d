"""
Production configuration via environment variables.
Load with python-dotenv; no hardcoded data paths or font files.
"""
import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env if present (optional in production where env is set by orchestrator)
load_dotenv()

# ----- Server -----
PORT = int(os.environ.get("PORT", "8001"))
HOST = os.environ.get("HOST", "0.0.0.0")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

# ----- Quran data -----
QURAN_DATA_PATH = os.environ.get("QURAN_DATA_PATH", "")
# If empty, we try quran_with_audio.json then quran.json in cwd
def get_quran_path() -> str:
    if QURAN_DATA_PATH and os.path.isfile(QURAN_DATA_PATH):
        return QURAN_DATA_PATH
    for name in ("quran_with_audio.json", "quran.json"):
        p = Path.cwd() / name
        if p.exists():
            return str(p)
    return ""

# ----- Summary image -----
SUMMARY_SCALE = int(os.environ.get("SUMMARY_SCALE", "2"))
SUMMARY_JPEG_QUALITY = int(os.environ.get("SUMMARY_JPEG_QUALITY", "90"))
SUMMARY_OUTPUT_DIR = os.environ.get("SUMMARY_OUTPUT_DIR", "summaries")
APP_NAME = os.environ.get("APP_NAME", "Hifz Practice")

# TrueType files; empty means Pillow's bundled font (no Arabic glyphs)
ARABIC_FONT_PATH = os.environ.get("ARABIC_FONT_PATH", "")
UI_FONT_PATH = os.environ.get("UI_FONT_PATH", "")
UI_BOLD_FONT_PATH = os.environ.get("UI_BOLD_FONT_PATH", "")

def get_font_set():
    """FontSet for the summary renderer from the *_FONT_PATH variables."""
    from render.fonts import FontSet
    return FontSet(
        arabic_path=ARABIC_FONT_PATH or None,
        ui_path=UI_FONT_PATH or None,
        ui_bold_path=UI_BOLD_FONT_PATH or None,
    )

# ----- CORS (production: set to specific origins) -----
CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")
def get_cors_origins() -> list:
    """Return list of allowed CORS origins from env."""
    if CORS_ORIGINS == "*":
        return ["*"]
    return [o.strip() for o in CORS_ORIGINS.split(",") if o.strip()]
