"""
Interview Assistant - FastAPI Backend

Timed practice interviews with heuristic scoring:
- Resume upload or manual entry to register a candidate
- Six timed questions with auto-submit on timeout
- Score and summary on completion
- Searchable candidate list for interviewers
- JSON export/import and a local backup slot
"""
import asyncio
import logging
import os
import sys
import time
import uuid
from contextlib import asynccontextmanager, suppress
from typing import Any, Callable, Dict, Optional

from fastapi import Depends, FastAPI, File, HTTPException, Query, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from utils.config import config as default_config, Config
from utils.errors import InterviewAssistantError
from utils.resume_parser import ResumeParser
from models.schemas import AnswerRequest, Candidate, CandidateInfo, DraftRequest
from interview.questions import QuestionBank
from interview.scoring import AnswerScorer
from interview.state import InterviewStateMachine, SessionStatus, format_time
from interview.summary import CandidateSummarizer
from storage.backup import BackupManager
from storage.candidate_store import load_store
from storage.kv_store import FileKeyValueStore, KeyValueStore

logger = logging.getLogger(__name__)

APP_VERSION = "1.0.0"


# ================================================================
# Service wiring
# ================================================================

class Services:
    """Everything one app instance works with, created once per app."""

    def __init__(
        self,
        kv: KeyValueStore,
        config: Config,
        clock: Callable[[], float] = time.monotonic,
        question_bank: Optional[QuestionBank] = None,
        scorer: Optional[AnswerScorer] = None,
    ):
        self.config = config
        self.kv = kv
        self.store = load_store(kv, config.storage.state_key)
        self.question_bank = question_bank or QuestionBank(config=config)
        self.scorer = scorer or AnswerScorer(config=config)
        self.summarizer = CandidateSummarizer(self.scorer, config)
        self.machine = InterviewStateMachine(
            self.store,
            question_bank=self.question_bank,
            scorer=self.scorer,
            summarizer=self.summarizer,
            clock=clock,
            config=config,
        )
        self.backup = BackupManager(kv, config)
        self.resume_parser = ResumeParser()


def get_services(request: Request) -> Services:
    return request.app.state.services


async def _run_timer(services: Services, interval: float):
    """Single periodic source driving the countdown."""
    while True:
        await asyncio.sleep(interval)
        try:
            services.machine.tick()
        except Exception:
            logger.exception("Timer tick failed")


def create_app(services: Optional[Services] = None, config: Optional[Config] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        services: Pre-built services, mainly for tests
        config: Configuration used when services are built here
    """
    config = config or default_config
    if services is None:
        services = Services(FileKeyValueStore(config.storage.data_dir), config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        task = asyncio.create_task(_run_timer(services, config.interview.timer_interval_seconds))
        try:
            yield
        finally:
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task

    app = FastAPI(
        title="Interview Assistant API",
        description="Timed practice interviews with heuristic scoring and JSON backups",
        version=APP_VERSION,
        lifespan=lifespan,
    )
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(InterviewAssistantError)
    async def handle_assistant_error(request: Request, exc: InterviewAssistantError):
        logger.warning(f"{exc.__class__.__name__} on {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    _register_routes(app)
    return app


# ================================================================
# Helpers
# ================================================================

def _candidate_row(candidate: Candidate) -> Dict[str, Any]:
    return {
        "id": candidate.id,
        "name": candidate.name,
        "email": candidate.email,
        "score": candidate.score,
        "createdAt": candidate.created_at.isoformat(),
        "answers_count": len(candidate.answers),
    }


def _start_for(services: Services, info: CandidateInfo) -> Dict[str, Any]:
    machine = services.machine

    if machine.status == SessionStatus.ACTIVE:
        raise HTTPException(status_code=409, detail="An interview is already in progress.")
    if machine.has_unfinished_interview():
        raise HTTPException(
            status_code=409,
            detail="An unfinished interview exists. Resume or reset it first."
        )
    if machine.status == SessionStatus.COMPLETED:
        machine.abandon()

    candidate = Candidate(
        id=f"candidate-{uuid.uuid4().hex[:12]}",
        name=info.name,
        email=info.email,
        phone=info.phone,
        resume_text=info.resume_text,
    )
    machine.start(candidate)
    return machine.get_status()


# ================================================================
# API Endpoints
# ================================================================

def _register_routes(app: FastAPI):

    @app.get("/")
    async def root(services: Services = Depends(get_services)):
        """Health check endpoint."""
        return {
            "status": "running",
            "version": APP_VERSION,
            "service": "Interview Assistant",
            "total_candidates": len(services.store.candidates),
            "completed_interviews": services.store.completed_count,
            "difficulties": services.question_bank.get_all_difficulties_info(),
            "storage": services.backup.storage_usage().model_dump(),
        }

    # ------------------------------------------------------------
    # Interviewee flow
    # ------------------------------------------------------------

    @app.post("/resume-upload")
    async def resume_upload(
        file: UploadFile = File(...),
        services: Services = Depends(get_services),
    ):
        """
        Parse a PDF or DOCX resume.

        Starts the interview when name, email and phone were all found;
        otherwise returns the partial data for manual completion.
        """
        content = await file.read()
        parsed = services.resume_parser.parse(file.filename or "", file.content_type, content)

        missing = parsed.missing_fields()
        if missing:
            return {
                "parsed": parsed.model_dump(),
                "missing_fields": missing,
                "message": "Please complete any missing information from your resume.",
                "interview": None,
            }

        info = CandidateInfo(
            name=parsed.name,
            email=parsed.email,
            phone=parsed.phone,
            resume_text=parsed.resume_text,
        )
        return {
            "parsed": parsed.model_dump(),
            "missing_fields": [],
            "interview": _start_for(services, info),
        }

    @app.post("/candidates")
    async def create_candidate(info: CandidateInfo, services: Services = Depends(get_services)):
        """Register a candidate from manual entry and start the interview."""
        return _start_for(services, info)

    @app.get("/interview-status")
    async def interview_status(services: Services = Depends(get_services)):
        """Current question, countdown and result."""
        services.machine.tick()
        return services.machine.get_status()

    @app.post("/interview/tick")
    async def interview_tick(services: Services = Depends(get_services)):
        """Account elapsed time; auto-submits when the countdown ends."""
        answer = services.machine.tick()
        status = services.machine.get_status()
        status["auto_submitted"] = answer.to_wire() if answer else None
        return status

    @app.post("/interview/draft")
    async def interview_draft(request: DraftRequest, services: Services = Depends(get_services)):
        """Store the unsent answer so a timeout submits it."""
        if services.machine.status != SessionStatus.ACTIVE:
            raise HTTPException(status_code=400, detail="No active interview.")
        services.machine.update_draft(request.text)
        return {"status": "draft saved", "characters": len(request.text)}

    @app.post("/interview/answer")
    async def interview_answer(request: AnswerRequest, services: Services = Depends(get_services)):
        """Submit the answer for the current question."""
        machine = services.machine
        if machine.status != SessionStatus.ACTIVE:
            raise HTTPException(status_code=400, detail="No active interview.")

        answer = machine.submit_answer(request.text)
        if answer is None:
            raise HTTPException(status_code=400, detail="Please type an answer before submitting.")

        status = machine.get_status()
        status["submitted"] = answer.to_wire()
        status["follow_up_hint"] = services.question_bank.follow_up(answer.difficulty)
        return status

    @app.post("/interview/resume")
    async def interview_resume(services: Services = Depends(get_services)):
        """Continue an unfinished interview."""
        if not services.machine.resume():
            raise HTTPException(status_code=400, detail="No unfinished interview to resume.")
        return services.machine.get_status()

    @app.post("/interview/reset")
    async def interview_reset(services: Services = Depends(get_services)):
        """Discard the current interview and start fresh."""
        services.machine.abandon()
        return {"status": "Interview reset successfully"}

    # ------------------------------------------------------------
    # Interviewer dashboard
    # ------------------------------------------------------------

    @app.get("/candidates")
    async def list_candidates(
        search: str = Query("", max_length=200),
        services: Services = Depends(get_services),
    ):
        """Candidates matching the search term by name or email."""
        store = services.store
        matches = store.search(search)
        return {
            "total": len(store.candidates),
            "completed": store.completed_count,
            "candidates": [_candidate_row(c) for c in matches],
        }

    @app.get("/candidates/{candidate_id}")
    async def candidate_detail(candidate_id: str, services: Services = Depends(get_services)):
        """Full record with profile analysis."""
        candidate = services.store.get_candidate(candidate_id)
        if candidate is None:
            raise HTTPException(status_code=404, detail="Candidate not found.")

        return {
            "candidate": candidate.to_wire(),
            "total_time_spent": format_time(candidate.total_time_spent),
            "analysis": services.summarizer.analyze_profile(candidate.answers).model_dump(),
        }

    # ------------------------------------------------------------
    # Data management
    # ------------------------------------------------------------

    @app.get("/data/export")
    async def export_data(services: Services = Depends(get_services)):
        """Download all candidates as a backup document."""
        candidates = services.store.candidates
        if not candidates:
            raise HTTPException(status_code=400, detail="No candidates to export.")

        payload, filename = services.backup.serialize(candidates)
        logger.info(f"Exported {len(candidates)} candidates to {filename}")
        return Response(
            content=payload,
            media_type="application/json",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    @app.post("/data/import")
    async def import_data(
        file: UploadFile = File(...),
        services: Services = Depends(get_services),
    ):
        """Add candidates from a backup document under new ids."""
        raw = await file.read()
        imported = services.backup.import_into(services.store, raw)
        return {
            "imported": len(imported),
            "message": f"Successfully imported {len(imported)} candidates!",
            "storage_notice": services.store.storage_notice,
        }

    @app.post("/data/backup")
    async def create_local_backup(services: Services = Depends(get_services)):
        services.backup.save_local_backup(services.store.candidates)
        return {"status": "Local backup created successfully!"}

    @app.get("/data/backup")
    async def read_local_backup(services: Services = Depends(get_services)):
        candidates = services.backup.load_local_backup()
        if candidates is None:
            raise HTTPException(status_code=404, detail="No valid local backup found.")
        return {"candidates": [c.to_wire() for c in candidates]}

    @app.delete("/data/backup")
    async def delete_local_backup(services: Services = Depends(get_services)):
        services.backup.clear_local_backup()
        return {"status": "Local backup cleared."}

    @app.get("/data/storage")
    async def storage_usage(services: Services = Depends(get_services)):
        usage = services.backup.storage_usage()
        result = usage.model_dump()
        if usage.nearly_full:
            result["warning"] = (
                "Storage is nearly full. Consider exporting and clearing old data to free up space."
            )
        return result

    @app.delete("/data")
    async def clear_all_data(services: Services = Depends(get_services)):
        """Remove every candidate and the interview state."""
        services.machine.abandon()
        services.store.clear_all()
        logger.info("All data cleared")
        return {"status": "All data cleared successfully."}


app = create_app()


# ================================================================
# Main Entry Point
# ================================================================

if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=default_config.log_level,
        format='%(asctime)s - %(levelname)s - %(message)s',
    )
    uvicorn.run(app, host="0.0.0.0", port=8000)
