"""Questionnaire storage API routes."""
import logging

from fastapi import APIRouter, Depends, Query, Request

from ..config import Settings, get_settings
from ..database import DatabaseManager
from ..models.questionnaire import (
    ErrorResponse,
    QuestionnaireListResponse,
    QuestionnaireSubmissionIn,
    StoredQuestionnaire,
    SubmitResponse,
)

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Questionnaire"])


def get_db_manager(request: Request) -> DatabaseManager:
    """Database manager of the running application."""
    return request.app.state.db_manager


def get_app_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


@router.post(
    "/questionnaire-data",
    response_model=SubmitResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def submit_questionnaire(
    submission: QuestionnaireSubmissionIn,
    db: DatabaseManager = Depends(get_db_manager),
):
    """Store one completed daily questionnaire."""
    payload = submission.model_dump(mode="json", by_alias=True)
    record_id = db.insert_questionnaire(payload)
    log.info(
        f"[API] Questionnaire {record_id} stored for {submission.user_id} "
        f"(fatigue={submission.has_excessive_fatigue}, v{submission.questionnaire_version})"
    )
    return SubmitResponse(id=record_id)


@router.get("/questionnaire-data", response_model=QuestionnaireListResponse)
async def list_questionnaires(
    user_id: str = Query(..., alias="userId", min_length=1, description="User to list"),
    limit: int | None = Query(default=None, ge=1, description="Maximum number of records"),
    db: DatabaseManager = Depends(get_db_manager),
    settings: Settings = Depends(get_app_settings),
):
    """Get a user's stored questionnaires, newest first."""
    effective_limit = min(limit or settings.default_limit, settings.max_limit)
    rows = db.list_questionnaires(user_id, effective_limit)
    return QuestionnaireListResponse(data=[StoredQuestionnaire(**row) for row in rows])
