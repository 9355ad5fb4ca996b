"""FastAPI app exposing the captions proxy, session flows and the single page UI."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import FileResponse, JSONResponse
from pydantic import BaseModel

from models.session import PlannerSession, SessionStore
from trip_planner import TripPlanner
from utils.errors import InputError

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / "static"


class SearchRequest(BaseModel):
    prompt: str


def create_app(planner: TripPlanner) -> FastAPI:
    """Build the web app around a configured planner."""
    app = FastAPI(title="tripreel", version="0.1.0")
    sessions = SessionStore(
        max_sessions=planner.config.get("max_sessions", 200),
        ttl_seconds=planner.config.get("session_ttl_seconds", 3600.0),
    )
    app.state.planner = planner
    app.state.sessions = sessions

    def get_session(session_id: str) -> PlannerSession:
        session = sessions.get(session_id)
        if session is None:
            raise HTTPException(status_code=404, detail="Unknown session")
        return session

    def ensure_idle(session: PlannerSession) -> None:
        if session.loading:
            raise HTTPException(status_code=409, detail="Session is busy")

    @app.get("/", include_in_schema=False)
    async def index():
        return FileResponse(STATIC_DIR / "index.html")

    @app.get("/api/captions")
    async def captions(video_id: Optional[str] = Query(None, alias="videoId")):
        """Caption transcript for one video, null when unavailable."""
        if not video_id:
            return JSONResponse({"transcript": None}, status_code=400)

        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(
            None, planner.transcript_service.fetch_transcript, video_id
        )
        return {"transcript": result.value}

    @app.post("/api/sessions")
    async def create_session():
        session = sessions.create()
        logger.info(f"Created session {session.session_id}")
        return session.to_dict()

    @app.get("/api/sessions/{session_id}")
    async def read_session(session_id: str):
        return get_session(session_id).to_dict()

    @app.post("/api/sessions/{session_id}/search")
    async def search(session_id: str, body: SearchRequest):
        session = get_session(session_id)
        ensure_idle(session)
        try:
            await planner.handle_search(session, body.prompt)
        except InputError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return session.to_dict()

    @app.post("/api/sessions/{session_id}/selection/{index}")
    async def toggle_selection(session_id: str, index: int):
        session = get_session(session_id)
        ensure_idle(session)
        try:
            session.toggle_selection(index)
        except InputError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return session.to_dict()

    @app.post("/api/sessions/{session_id}/itinerary")
    async def itinerary(session_id: str):
        session = get_session(session_id)
        ensure_idle(session)
        await planner.handle_generate(session)
        return session.to_dict()

    return app
