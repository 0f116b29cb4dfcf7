import os
from dotenv import load_dotenv

load_dotenv()

ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY", "")
ANTHROPIC_MODEL = os.getenv("ANTHROPIC_MODEL", "claude-sonnet-4-5")
COMPLETION_MAX_TOKENS = int(os.getenv("COMPLETION_MAX_TOKENS", "1024"))
# No transport-level bound exists otherwise; a timeout is treated like any other failure
COMPLETION_TIMEOUT_S = float(os.getenv("COMPLETION_TIMEOUT_S", "20"))

DATABASE_PATH = os.getenv("DATABASE_PATH", "todos.db")

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Apply-run pacing (seconds)
SCHEDULE_APPLY_PACING_S = float(os.getenv("SCHEDULE_APPLY_PACING_S", "0.5"))
SCHEDULE_APPLY_COMPLETION_PAUSE_S = float(os.getenv("SCHEDULE_APPLY_COMPLETION_PAUSE_S", "0.8"))
BREAKDOWN_APPLY_PACING_S = float(os.getenv("BREAKDOWN_APPLY_PACING_S", "0.3"))
BREAKDOWN_APPLY_COMPLETION_PAUSE_S = float(os.getenv("BREAKDOWN_APPLY_COMPLETION_PAUSE_S", "0.2"))

BREAKDOWN_DEBOUNCE_S = float(os.getenv("BREAKDOWN_DEBOUNCE_S", "1.0"))
