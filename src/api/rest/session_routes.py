"""REST API routes for the match review workflow."""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from coaching.models import DEFAULT_RESULT, DEFAULT_ROLE

from ..dependencies import get_context, raise_for_result, raise_internal
from ..transformers.frontend_transformer import transform_record, transform_session
from ...application.use_cases.match_review import ConfigureMatchRequest, MatchReviewUseCase
from ...infrastructure.context import CoachContext

router = APIRouter(prefix="/api/session", tags=["review"])


class StartReviewRequest(BaseModel):
    """Match details entered before the review."""

    role: str = Field(default=DEFAULT_ROLE.value, description="Top, Jungle, Mid, ADC or Support")
    champion: str = Field(..., description="Champion played", min_length=1)
    result: str = Field(default=DEFAULT_RESULT.value, description="Win or Loss")


class NoteRequest(BaseModel):
    note: str = ""


def _use_case(ctx: CoachContext) -> MatchReviewUseCase:
    return MatchReviewUseCase(ctx.session, ctx.store)


@router.get("")
async def get_session(ctx: CoachContext = Depends(get_context)):
    """Current state of the match review."""
    return transform_session(_use_case(ctx).state().session)


@router.post("/start")
async def start_review(request: StartReviewRequest, ctx: CoachContext = Depends(get_context)):
    """Load the knowledge base and build the checklist for this match."""
    try:
        result = await _use_case(ctx).start(
            ConfigureMatchRequest(role=request.role, subject=request.champion, result=request.result)
        )
        raise_for_result(result)
        return transform_session(result.session)
    except HTTPException:
        raise
    except Exception as e:
        raise_internal(e, "starting review")


@router.post("/checklist/{index}/toggle")
async def toggle_item(index: int, ctx: CoachContext = Depends(get_context)):
    result = _use_case(ctx).toggle(index)
    raise_for_result(result)
    return transform_session(result.session)


@router.put("/note")
async def set_note(request: NoteRequest, ctx: CoachContext = Depends(get_context)):
    result = _use_case(ctx).set_note(request.note)
    raise_for_result(result)
    return transform_session(result.session)


@router.post("/back")
async def back(ctx: CoachContext = Depends(get_context)):
    """Return to match configuration, discarding the checklist."""
    result = _use_case(ctx).back()
    raise_for_result(result)
    return transform_session(result.session)


@router.post("/save")
async def save_review(ctx: CoachContext = Depends(get_context)):
    """Persist the review as a match record.

    On failure the checklist and note are kept so the save can be retried.
    """
    try:
        result = await _use_case(ctx).save()
        raise_for_result(result)
        return {
            "record": transform_record(result.record),
            "session": transform_session(result.session),
        }
    except HTTPException:
        raise
    except Exception as e:
        raise_internal(e, "saving match")
