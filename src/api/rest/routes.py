"""REST API routes for advice extraction, the knowledge base and the dashboard."""

import os
import tempfile
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel, Field

from coaching.errors import CoachingError
from coaching.report_pdf import build_pdf

from ..dependencies import get_context, raise_for_error, raise_for_result, raise_internal
from ..transformers.frontend_transformer import (
    transform_advice,
    transform_candidates,
    transform_summary,
)
from ...application.use_cases._runner import run_blocking
from ...application.use_cases.analyze_video import (
    AnalyzeVideoRequest,
    AnalyzeVideoUseCase,
    SaveAdviceUseCase,
)
from ...application.use_cases.dashboard import DashboardUseCase
from ...infrastructure.context import CoachContext

router = APIRouter(prefix="/api", tags=["knowledge"])


class AnalyzeRequest(BaseModel):
    """Request body for video analysis."""

    video_url: str = Field(
        ...,
        alias="videoUrl",
        description="Video URL the model should analyze",
        min_length=1,
    )
    notes: str = Field(
        default="",
        description="Extra context, e.g. 'focus on wave management for mid lane'",
    )

    class Config:
        populate_by_name = True


class SaveAdviceRequest(BaseModel):
    """Request body for saving the analyzed advice."""

    title: Optional[str] = Field(
        default=None,
        description="Source title stored with each advice row",
    )


@router.post("/extraction/analyze")
async def analyze_video(request: AnalyzeRequest, ctx: CoachContext = Depends(get_context)):
    """Extract advice candidates from a video.

    The candidates are kept server-side until saved with
    POST /api/knowledge/advice or replaced by the next analysis.
    """
    try:
        use_case = AnalyzeVideoUseCase(ctx.analyzer)
        result = await use_case.execute(
            AnalyzeVideoRequest(video_url=request.video_url, notes=request.notes)
        )
        raise_for_result(result)
        return {"title": result.title, "items": transform_candidates(result.items)}
    except HTTPException:
        raise
    except Exception as e:
        raise_internal(e, "analyzing video")


@router.post("/knowledge/advice")
async def save_advice(request: SaveAdviceRequest, ctx: CoachContext = Depends(get_context)):
    """Append the current candidates to the Knowledge Base."""
    try:
        result = await SaveAdviceUseCase(ctx.analyzer, ctx.store).execute(request.title)
        raise_for_result(result)
        return {"saved": transform_advice(result.saved), "count": len(result.saved)}
    except HTTPException:
        raise
    except Exception as e:
        raise_internal(e, "saving advice")


@router.get("/knowledge/advice")
async def list_advice(ctx: CoachContext = Depends(get_context)):
    """Return the whole Knowledge Base."""
    try:
        advice = await run_blocking(ctx.store.fetch_knowledge_base)
        return {"items": transform_advice(advice), "count": len(advice)}
    except CoachingError as e:
        raise_for_error(e)


@router.post("/knowledge/init")
async def init_sheets(ctx: CoachContext = Depends(get_context)):
    """Create the Knowledge_Base and Match_History tabs if they are missing."""
    try:
        created = await run_blocking(ctx.store.ensure_sheets)
        return {"created": created}
    except CoachingError as e:
        raise_for_error(e)


@router.get("/dashboard")
async def get_dashboard(ctx: CoachContext = Depends(get_context)):
    """Aggregated match statistics for the dashboard."""
    try:
        result = await DashboardUseCase(ctx.store).execute()
        raise_for_result(result)
        return transform_summary(result.summary)
    except HTTPException:
        raise
    except Exception as e:
        raise_internal(e, "building dashboard")


@router.get("/dashboard/report.pdf")
async def get_dashboard_pdf(ctx: CoachContext = Depends(get_context)):
    """Dashboard rendered as a PDF with charts."""
    result = await DashboardUseCase(ctx.store).execute()
    raise_for_result(result)
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "dashboard.pdf")
        await run_blocking(build_pdf, result.summary, path)
        with open(path, "rb") as f:
            content = f.read()
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": 'attachment; filename="dashboard.pdf"'},
    )
