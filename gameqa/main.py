"""
FastAPI Main Application - GameQA
"""
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from . import default_language_model
from .capture.artifact_store import ArtifactStore
from .config import settings
from .handler import handler


app = FastAPI(
    title=settings.APP_NAME,
    description="Automated playability testing for browser games",
    version="1.0.0"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# One language model client shared by every request
app.state.llm = default_language_model()
app.state.store = ArtifactStore()


# Request Models
class TestGameRequest(BaseModel):
    url: str
    options: Optional[Dict[str, Any]] = None


# API Endpoints
@app.post("/api/test-game")
async def test_game(request: TestGameRequest):
    """
    Run a playability test and return the report.
    """
    result = await handler(
        {"url": request.url, "options": request.options},
        llm=app.state.llm,
        store=app.state.store
    )
    return result.model_dump(mode="json")


@app.get("/api/report/{session_id}")
async def get_report(session_id: str):
    """
    Get the persisted report of a session.
    """
    report = app.state.store.load_report(session_id)
    if report is None:
        raise HTTPException(status_code=404, detail="Report not found")
    return report


@app.get("/api/artifacts/{session_id}")
async def get_artifacts(session_id: str):
    """
    List all artifacts for a session.
    """
    if not ArtifactStore.is_valid_session_id(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return {
        "session_id": session_id,
        "artifacts": app.state.store.list_artifacts(session_id)
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
