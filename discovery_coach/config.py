"""Service settings from the environment (.env is loaded by discovery_coach.main)."""

import os
from pathlib import Path

LOG_DIR = Path(
    os.environ.get("DISCOVERY_COACH_LOG_DIR", str(Path.home() / ".discovery-coach" / "logs"))
).expanduser()
LOG_LEVEL = os.environ.get("DISCOVERY_COACH_LOG_LEVEL", "WARNING").upper()
# Turns kept at the HTTP boundary before scoring
MAX_TURNS = int(os.environ.get("DISCOVERY_COACH_MAX_TURNS", "12"))
