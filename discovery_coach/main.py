"""Discovery Coach: conversation-stage decision engine API entrypoint."""

from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parents[1] / ".env")

from fastapi import FastAPI

from discovery_coach.live.router import router as conversation_router
from discovery_coach.logging_config import setup_logging

logger = setup_logging()

app = FastAPI(
    title="Discovery Coach Conversation Engine",
    description="Rubric → Phase → Guidance for each turn of a guided self-discovery conversation",
)
app.include_router(conversation_router)


@app.get("/health")
def health():
    return {"status": "ok"}
