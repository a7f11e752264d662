from pathlib import Path
import os

from dotenv import load_dotenv

# Load environment variables from the working directory and the repo root (if present).
REPO_ROOT = Path(__file__).resolve().parents[1]
load_dotenv(Path.cwd() / ".env")
load_dotenv(REPO_ROOT / ".env")

TASKS_FILE = Path(os.getenv("TASKS_FILE", "tasks.json"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8080"))
RELOAD = os.getenv("RELOAD", "false").lower() in ("1", "true", "yes")

_cors_origins = os.getenv("CORS_ORIGINS", "*")
CORS_ORIGINS = [origin.strip() for origin in _cors_origins.split(",") if origin.strip()]
CORS_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
CORS_HEADERS = ["Content-Type"]
