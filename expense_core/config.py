"""Central configuration loaded from environment variables / .env file."""
import os
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

load_dotenv()

ROOT = Path(__file__).resolve().parent.parent


def _optional_float(name: str) -> Optional[float]:
    raw = os.getenv(name, "").strip()
    return float(raw) if raw else None


# ── Backend ────────────────────────────────────────────────────────────────
SUPABASE_URL: str = os.getenv("SUPABASE_URL", "")
SUPABASE_ANON_KEY: str = os.getenv("SUPABASE_ANON_KEY", "")
# Unset means no timeout: a call waits for the backend to answer.
RPC_TIMEOUT_SECONDS: Optional[float] = _optional_float("RPC_TIMEOUT_SECONDS")

# ── Remote schemas ─────────────────────────────────────────────────────────
SCHEMAS_DIR: Path = ROOT / "expense_core" / "remote" / "schemas"

# ── UI ─────────────────────────────────────────────────────────────────────
APP_TITLE: str = os.getenv("APP_TITLE", "交通費精算システム")
SUBMIT_MESSAGE_SECONDS: float = float(os.getenv("SUBMIT_MESSAGE_SECONDS", "3"))
MAX_ENTRY_ROWS: int = int(os.getenv("MAX_ENTRY_ROWS", "20"))

# ── Server ─────────────────────────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
SERVER_NAME: str = os.getenv("SERVER_NAME", "0.0.0.0")
SERVER_PORT: int = int(os.getenv("SERVER_PORT", "7860"))
