import asyncio
import logging
import os
from datetime import datetime
from typing import Optional

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from standup_digest.core import StandupCalendar, settings
from standup_digest.core.exceptions import (
    AIUnavailable,
    InvalidDateRange,
    InvalidUpdate,
    ReportingError,
)

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Report generation calls the LLM; keep the whole request under the host's timeout
REPORT_TIMEOUT_SECONDS = 50.0

# Rate limiting setup
limiter = Limiter(key_func=get_remote_address)

# Simple API key auth for production (optional)
security = HTTPBearer(auto_error=False)


def get_api_key() -> Optional[str]:
    """Get API key from environment if set"""
    return os.environ.get("API_KEY") or settings.API_KEY


async def verify_api_key(credentials: HTTPAuthorizationCredentials = Depends(security)):
    """Verify API key if set in environment"""
    api_key = get_api_key()

    # If no API key is configured, allow access
    if not api_key:
        return True

    if not credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="API key required")

    if credentials.credentials != api_key:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")
    return True


app = FastAPI(
    title="Standup Digest",
    docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT != "production" else None,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(InvalidUpdate)
async def invalid_update_handler(request: Request, exc: InvalidUpdate):
    return JSONResponse(status_code=400, content={"detail": str(exc), "errors": exc.errors})


@app.exception_handler(InvalidDateRange)
async def invalid_date_range_handler(request: Request, exc: InvalidDateRange):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(AIUnavailable)
async def ai_unavailable_handler(request: Request, exc: AIUnavailable):
    return JSONResponse(status_code=503, content={"detail": str(exc)})


@app.exception_handler(ReportingError)
async def reporting_error_handler(request: Request, exc: ReportingError):
    logger.error(f"Request to {request.url.path} failed: {exc}")
    return JSONResponse(status_code=500, content={"detail": str(exc)})


# --- Request bodies ---

class UpdateForm(BaseModel):
    name: str
    role: str = ""
    yesterday: str = ""
    today: str = ""
    blockers: str = ""
    member_id: Optional[str] = None


class ReportRequest(BaseModel):
    week_start: str
    week_end: str
    include_ai: bool = True


class DraftRequest(BaseModel):
    name: str
    role: str
    field: Optional[str] = None
    context: Optional[str] = None


# --- Lazy initialization for LLM and per-request services ---
_llm = None
_llm_initialized = False


def get_llm():
    global _llm, _llm_initialized
    if not _llm_initialized:
        logger.info("Initializing LLM...")
        from standup_digest.providers.llm_providers import create_llm

        _llm = create_llm()
        _llm_initialized = True
    return _llm


def get_calendar() -> StandupCalendar:
    return StandupCalendar()


def get_repository():
    from standup_digest.data import SQLAlchemyStandupRepository

    with SQLAlchemyStandupRepository() as repository:
        yield repository


def get_report_service(repository=Depends(get_repository), calendar=Depends(get_calendar)):
    from standup_digest.services import AISummarizer, RuleBasedSummarizer, WeeklyReportService

    fallback = RuleBasedSummarizer()
    return WeeklyReportService(
        repository,
        ai_summarizer=AISummarizer(get_llm(), fallback=fallback),
        fallback_summarizer=fallback,
        calendar=calendar,
    )


def get_standup_service(repository=Depends(get_repository), calendar=Depends(get_calendar)):
    from standup_digest.services import StandupService, TeamRoster

    return StandupService(repository, roster=TeamRoster.from_settings(), calendar=calendar)


def get_draft_generator(calendar=Depends(get_calendar)):
    from standup_digest.services import DraftGenerator

    return DraftGenerator(get_llm(), calendar=calendar)


_scheduler_task: Optional[asyncio.Task] = None


async def _run_scheduler():
    from standup_digest.data import SQLAlchemyStandupRepository
    from standup_digest.services import WeeklyReportScheduler

    calendar = get_calendar()
    with SQLAlchemyStandupRepository(calendar=calendar) as repository:
        service = get_report_service(repository=repository, calendar=calendar)
        await WeeklyReportScheduler(service).run_forever(settings.SCHEDULER_POLL_SECONDS)


def _log_scheduler_exit(task: asyncio.Task):
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.error(f"Weekly report scheduler stopped: {error!r}")


@app.on_event("startup")
async def startup_event():
    global _scheduler_task
    logger.info("FastAPI app starting up...")

    try:
        from standup_digest.data import init_database

        init_database()
        logger.info("Database initialized with SQLAlchemy and indexes")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise

    if settings.SCHEDULER_ENABLED:
        _scheduler_task = asyncio.create_task(_run_scheduler())
        _scheduler_task.add_done_callback(_log_scheduler_exit)

    logger.info("App startup complete!")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("FastAPI app shutting down...")
    if _scheduler_task is not None:
        _scheduler_task.cancel()


@app.get("/health")
async def health_check():
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}


@app.get("/health/database")
async def database_health_check():
    from standup_digest.data import DatabaseInitializer

    db_info = DatabaseInitializer.get_database_info()
    return {
        "status": "healthy" if db_info["connection_status"] == "Connected" else "unhealthy",
        "database_info": db_info,
        "timestamp": datetime.now().isoformat(),
    }


@app.get("/team")
async def get_team(service=Depends(get_standup_service)):
    return {
        "members": [member.to_dict() for member in service.roster.members()],
        "yesterday_label": service.previous_business_day_label(),
        "previous_business_day": service.calendar.previous_business_day(),
    }


@app.post("/updates", status_code=status.HTTP_201_CREATED)
async def submit_update(form: UpdateForm, service=Depends(get_standup_service)):
    record = await service.submit_form(form.model_dump())
    return record.to_dict()


@app.get("/updates/today")
async def today_updates(service=Depends(get_standup_service)):
    records = await service.get_today_standup()
    return {
        "date": service.calendar.today(),
        "records": [record.to_dict() for record in records],
        "previous_business_day_count": await service.get_previous_business_day_count(),
        "team_engagement": await service.get_team_engagement(),
    }


@app.get("/history")
async def history(limit: int = settings.DEFAULT_HISTORY_LIMIT, service=Depends(get_standup_service)):
    entries = await service.get_history(limit)
    return {"entries": [entry.to_dict() for entry in entries]}


@app.post("/reports/weekly")
@limiter.limit("5/minute")  # Limit report generation to prevent abuse
async def generate_weekly_report(
    request: Request,
    body: ReportRequest,
    service=Depends(get_report_service),
    _: bool = Depends(verify_api_key),
):
    logger.info(f"Starting report generation for {body.week_start} to {body.week_end}")
    try:
        report = await asyncio.wait_for(
            service.generate_weekly_report(body.week_start, body.week_end, include_ai=body.include_ai),
            timeout=REPORT_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError:
        logger.error("Report generation timed out")
        raise HTTPException(status_code=status.HTTP_504_GATEWAY_TIMEOUT, detail="Report generation timed out")
    return report.to_dict()


@app.post("/reports/weekly/store")
@limiter.limit("5/minute")
async def store_weekly_report(
    request: Request,
    body: ReportRequest,
    service=Depends(get_report_service),
    _: bool = Depends(verify_api_key),
):
    snapshot = await service.generate_and_store(body.week_start, body.week_end, include_ai=body.include_ai)
    return snapshot.to_dict()


@app.get("/reports")
async def list_reports(limit: int = 10, service=Depends(get_report_service)):
    snapshots = await service.list_reports(limit)
    return {"reports": [snapshot.to_dict() for snapshot in snapshots]}


@app.post("/drafts")
@limiter.limit("20/minute")
async def generate_draft(
    request: Request,
    body: DraftRequest,
    generator=Depends(get_draft_generator),
    standup_service=Depends(get_standup_service),
):
    history_entries = await standup_service.get_history()
    previous = [
        record
        for entry in reversed(history_entries)
        for record in entry.records
        if record.person_name == body.name
    ]

    if body.field:
        try:
            content = await generator.generate_field_content(
                body.name, body.role, body.field, body.context, previous
            )
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        return {body.field: content}

    return await generator.generate_full_draft(body.name, body.role, previous)


if __name__ == "__main__":
    uvicorn.run("standup_digest.web.app:app", host="0.0.0.0", port=int(os.environ.get("PORT", "8000")), reload=settings.DEBUG)
