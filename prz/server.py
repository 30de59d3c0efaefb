"""
PRZ FastAPI Server
Exposes the PRZ agent pipeline over REST, one agent per session.
"""

import logging
import uuid
from typing import Dict, List, Optional

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from .agent import PrzAgent
from .config import Config, configure_logging
from .errors import LoopDetectedError
from .feedback import UserFeedback
from .feedback_registry import feedback_impact, match_feedback_patterns
from .global_config import SyncStatus, apply_global_config, global_config_exists, sync_config
from .history import now_ms
from .intent import intent_to_vector
from .registry import ECHO_REGISTRY, find_best_echo

logger = logging.getLogger(__name__)

app = FastAPI(
    title="PRZ Server",
    description="Complete-Then-Validate agent pipeline",
    version="0.1.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# Agent per session id
agent_sessions: Dict[str, PrzAgent] = {}

# Apply global config on startup (env vars still override)
if global_config_exists():
    status, diff = sync_config()
    if status == SyncStatus.SYNCED:
        logger.info("[Server] Global config loaded (synchronized)")
    elif status == SyncStatus.CONFLICT:
        logger.info(f"[Server] Config conflict detected ({len(diff)} differences), applying global config")
        apply_global_config(apply_env_overrides=True)
else:
    logger.info("[Server] No global config found, using defaults")


# ============================================================================
# Request Models
# ============================================================================

class MatchRequest(BaseModel):
    text: str


class FeedbackPayload(BaseModel):
    artifact_id: str
    sentiment: str             # positive, neutral, negative
    type: str = "satisfaction"  # satisfaction, accuracy, completeness, usefulness
    confidence: float = Field(1.0, ge=0.0, le=1.0)
    intensity: float = Field(1.0, ge=0.0, le=1.0)
    comment: Optional[str] = None
    id: Optional[str] = None
    timestamp: Optional[int] = None


class RunRequest(BaseModel):
    text: str
    session: str = "default"
    feedback: Optional[FeedbackPayload] = None
    previous_interactions: Optional[List[str]] = None


class FeedbackAnalyzeRequest(BaseModel):
    comment: str


# ============================================================================
# Helper Functions
# ============================================================================

def get_or_create_agent(session: str) -> PrzAgent:
    if session not in agent_sessions:
        logger.info(f"[Server] Creating agent for session '{session}'")
        agent_sessions[session] = PrzAgent()
    return agent_sessions[session]


def to_user_feedback(payload: FeedbackPayload, timestamp: int) -> UserFeedback:
    return UserFeedback(
        id=payload.id or f"feedback:{uuid.uuid4().hex[:12]}",
        artifact_id=payload.artifact_id,
        sentiment=payload.sentiment,
        type=payload.type,
        confidence=payload.confidence,
        intensity=payload.intensity,
        timestamp=payload.timestamp if payload.timestamp is not None else timestamp,
        comment=payload.comment,
    )


# ============================================================================
# API Endpoints
# ============================================================================

@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "status": "running",
        "service": "PRZ Server",
        "version": "0.1.0",
        "active_sessions": list(agent_sessions.keys()),
    }


@app.get("/patterns")
async def list_patterns():
    return {"patterns": [p.to_dict() for p in ECHO_REGISTRY]}


@app.post("/match")
async def match(req: MatchRequest):
    best = find_best_echo(req.text)
    vector = intent_to_vector(req.text)
    intent = {"magnitude": round(vector.magnitude, 4), "direction": [round(v, 4) for v in vector.direction]}
    if best is None:
        return {"match": None, "intent": intent}
    return {
        "intent": intent,
        "match": {
            **best.pattern.to_dict(),
            "confidence": round(best.confidence, 4),
            "applied": best.applied,
        }
    }


@app.post("/run")
async def run(req: RunRequest):
    """Run a request through the session's agent, optionally with feedback."""
    timestamp = now_ms()
    try:
        feedback = to_user_feedback(req.feedback, timestamp) if req.feedback else None
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    agent = get_or_create_agent(req.session)
    try:
        result = agent.run(
            req.text,
            feedback=feedback,
            previous_interactions=req.previous_interactions,
            now_ms=timestamp,
        )
    except LoopDetectedError as e:
        raise HTTPException(
            status_code=429,
            detail={"reason": str(e), "suggested_pivot": e.suggested_pivot},
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return {"session": req.session, **result.to_dict()}


@app.get("/sessions")
async def list_sessions():
    return {"sessions": list(agent_sessions.keys())}


@app.get("/sessions/{session}")
async def session_status(session: str):
    if session not in agent_sessions:
        raise HTTPException(status_code=404, detail=f"Session '{session}' not found")
    return {"session": session, **agent_sessions[session].status()}


@app.delete("/sessions/{session}")
async def delete_session(session: str):
    if session not in agent_sessions:
        raise HTTPException(status_code=404, detail=f"Session '{session}' not found")
    del agent_sessions[session]
    return {"status": "deleted", "session": session}


@app.post("/feedback/analyze")
async def analyze_feedback(req: FeedbackAnalyzeRequest):
    matches = match_feedback_patterns(req.comment)
    return {
        "matches": [
            {
                "id": m.pattern.id,
                "sentiment": m.pattern.sentiment.value,
                "category": m.pattern.category.value,
                "improvement_action": m.pattern.improvement_action,
                "confidence": round(m.confidence, 4),
            }
            for m in matches
        ],
        "impact": round(feedback_impact(req.comment), 4),
    }


def start_server(host: str = None, port: int = None, reload: bool = None):
    """Start the PRZ server."""
    configure_logging()
    host = host or Config.server.HOST
    port = port or Config.server.PORT
    if reload is None:
        reload = Config.server.RELOAD
    logger.info(f"[Server] Starting PRZ server on {host}:{port}")

    uvicorn.run(
        "prz.server:app",
        host=host,
        port=port,
        reload=reload,
        log_level="info"
    )


if __name__ == "__main__":
    start_server(reload=True)
