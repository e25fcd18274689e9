import os
from datetime import timedelta
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent.parent

# Auth: tokens are issued by the external auth provider and signed with this shared secret.
SECRET_KEY = os.getenv("JWT_SECRET", "change-me-in-production")
ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ADMIN_EMAILS = {
    e.strip().lower() for e in os.getenv("ADMIN_EMAILS", "").split(",") if e.strip()
}

DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{BASE_DIR}/bugcrusher.db")

# Only teams of this category may use the dashboard; content lookups are scoped to it too.
COMPETITION_CATEGORY = os.getenv("COMPETITION_CATEGORY", "Senior-Scratch")
BUG_COUNT = int(os.getenv("BUG_COUNT", "10"))

# Blob storage
STORAGE_ROOT = Path(os.getenv("STORAGE_ROOT", str(BASE_DIR / "storage")))
STORAGE_PUBLIC_PATH = "/storage/v1/object/public"
STORAGE_PUBLIC_BASE_URL = os.getenv(
    "STORAGE_PUBLIC_BASE_URL", f"http://localhost:8000{STORAGE_PUBLIC_PATH}"
).rstrip("/")

BUG_BUCKET = "bugScreenshots"
ENHANCEMENT_BUCKET = "enhancementScreenshots"
BRAINSTORM_BUCKET = "brainstormMap"
PROJECT_BUCKET = "projectFiles"

# Attachment limits
MAX_FILES = 4
MAX_FILE_SIZE = 3 * 1024 * 1024  # 3 MiB
MAX_PROJECT_FILE_SIZE = int(os.getenv("MAX_PROJECT_FILE_SIZE", str(50 * 1024 * 1024)))
BRAINSTORM_EXTENSIONS = {".pdf"}
PROJECT_EXTENSIONS = {".sb3"}

# Fixed regional offset (UTC+8) applied to every displayed wall-clock time. Not configurable.
DISPLAY_OFFSET = timedelta(hours=8)

COUNTDOWN_TICK_SECONDS = 1.0

# Clients are told to wait this long before reloading after a blocked write
RELOAD_AFTER_MS = 1500
