import datetime
import logging
from typing import Any, Dict, Optional, Union

from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from src import config
from src.exceptions import FeedbackValidationError
from src.feedback_store import FeedbackStore
from src.pipeline import FeedbackService
from src.reporting.render import render_dashboard
from src.result_cache import create_result_cache

# Set up logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", level=config.LOG_LEVEL
)
logger = logging.getLogger(__name__)


class FeedbackSubmission(BaseModel):
    """Body of ``POST /api/feedback``.

    ``source`` and ``content`` are optional here so that a missing field is
    reported as a 400 naming the field rather than a generic 422.

    Responses use snake_case keys throughout. ``sourceId`` is accepted as an
    input alias of ``source_id`` and is echoed back as ``source_id``.
    """

    model_config = ConfigDict(populate_by_name=True)

    source: Optional[str] = None
    content: Optional[str] = None
    source_id: Optional[str] = Field(default=None, alias="sourceId")
    author: Optional[str] = None
    metadata: Union[str, Dict[str, Any], None] = None


def build_default_service() -> FeedbackService:
    """Wire the service from environment configuration."""
    store = FeedbackStore.from_url(config.DATABASE_URL)
    cache = create_result_cache(config.REDIS_URL)
    return FeedbackService(store, cache)


def get_service(request: Request) -> FeedbackService:
    return request.app.state.service


def _error_response(action: str, exc: Exception) -> JSONResponse:
    logger.error("Error %s: %s", action, exc, exc_info=True)
    return JSONResponse({"error": str(exc)}, status_code=500)


def create_app(service: Optional[FeedbackService] = None) -> FastAPI:
    """Build the HTTP application around *service* (or the configured default)."""

    if service is None:
        service = build_default_service()
        if config.AUTO_INIT_DB:
            try:
                service.init()
            except Exception:  # noqa: BLE001  /api/init can retry later
                logger.exception("Automatic schema initialisation failed")

    api = FastAPI(title="Feedback Pulse", version="0.1.0")
    api.state.service = service

    # Open CORS posture: no cookies or credentials are used by the API.
    api.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @api.get("/api/health")
    def health() -> Dict[str, Any]:
        return {
            "status": "ok",
            "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        }

    @api.post("/api/init")
    def init_database(svc: FeedbackService = Depends(get_service)):
        try:
            svc.init()
        except Exception as exc:  # noqa: BLE001
            logger.error("Database initialisation failed: %s", exc, exc_info=True)
            return JSONResponse({"success": False, "error": str(exc)}, status_code=500)
        return {"success": True, "message": "Database initialized"}

    @api.post("/api/feedback")
    def submit_feedback(
        body: FeedbackSubmission, svc: FeedbackService = Depends(get_service)
    ):
        try:
            record_id, analysis = svc.submit(
                body.source,
                body.content,
                source_id=body.source_id,
                author=body.author,
                metadata=body.metadata,
            )
        except FeedbackValidationError as exc:
            logger.info("Rejected feedback submission: %s", exc)
            return JSONResponse({"error": str(exc)}, status_code=400)
        except Exception as exc:  # noqa: BLE001
            return _error_response("submitting feedback", exc)
        return {"success": True, "id": record_id, "analysis": analysis.to_dict()}

    @api.get("/api/feedback")
    def list_feedback(
        source: Optional[str] = None,
        sentiment: Optional[str] = None,
        urgency: Optional[str] = None,
        limit: int = Query(default=config.DEFAULT_LIST_LIMIT, ge=0),
        offset: int = Query(default=0, ge=0),
        svc: FeedbackService = Depends(get_service),
    ):
        """Return one page of feedback, newest first.

        ``total`` counts every row matching the filters, not just the rows on
        this page, so clients can page through with ``limit``/``offset``.
        """
        try:
            records, total = svc.list_feedback(
                source=source,
                sentiment=sentiment,
                urgency=urgency,
                limit=limit,
                offset=offset,
            )
        except Exception as exc:  # noqa: BLE001
            return _error_response("listing feedback", exc)
        return {"feedback": [r.to_dict() for r in records], "total": total}

    @api.get("/api/stats")
    def stats(svc: FeedbackService = Depends(get_service)):
        try:
            return svc.stats()
        except Exception as exc:  # noqa: BLE001
            return _error_response("computing stats", exc)

    @api.get("/api/summary")
    def summary(svc: FeedbackService = Depends(get_service)):
        try:
            return svc.summary()
        except Exception as exc:  # noqa: BLE001
            return _error_response("generating summary", exc)

    @api.post("/api/reset")
    def reset(svc: FeedbackService = Depends(get_service)):
        try:
            svc.reset()
        except Exception as exc:  # noqa: BLE001
            return _error_response("resetting feedback", exc)
        return {"success": True, "message": "All feedback cleared"}

    @api.post("/api/seed")
    def seed(svc: FeedbackService = Depends(get_service)):
        try:
            imported = svc.seed()
        except Exception as exc:  # noqa: BLE001
            return _error_response("seeding demo data", exc)
        return {"success": True, "imported": imported}

    @api.get("/", response_class=HTMLResponse)
    def dashboard(svc: FeedbackService = Depends(get_service)):
        try:
            return render_dashboard(svc.stats())
        except Exception as exc:  # noqa: BLE001  render the error card instead
            logger.warning("Dashboard stats unavailable: %s", exc)
            return render_dashboard(None, error=str(exc))

    return api
