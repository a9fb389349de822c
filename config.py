import os
from dotenv import load_dotenv

# Load environment variables if present
load_dotenv()


def _flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "y", "on")


DATABASE_URL = os.getenv("DATABASE_URL", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("DATABASE_NAME", "studentdb")

PASS_THRESHOLD = float(os.getenv("PASS_THRESHOLD", 70))
MAX_LEVELS = int(os.getenv("MAX_LEVELS", 9))

SEED_DEMO = _flag("SEED_DEMO", True)
AUTO_REBUILD = _flag("AUTO_REBUILD", False)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
PORT = int(os.getenv("PORT", 8000))
