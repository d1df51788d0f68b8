"""REST API routes for settings and Google sign-in."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from coaching.errors import CoachingError

from ..dependencies import get_context, raise_for_error
from ...application.use_cases._runner import run_blocking
from ...infrastructure.context import CoachContext

router = APIRouter(prefix="/api", tags=["settings"])


class SettingsRequest(BaseModel):
    """Settings form. Omitted fields keep their stored value."""

    spreadsheet_id: Optional[str] = Field(default=None, alias="spreadsheetId")
    client_id: Optional[str] = Field(default=None, alias="clientId")
    api_key: Optional[str] = Field(default=None, alias="apiKey", description="Gemini API key")

    class Config:
        populate_by_name = True


def _settings_view(ctx: CoachContext) -> dict:
    s = ctx.settings
    return {
        "spreadsheetId": s.spreadsheet_id,
        "clientId": s.client_id,
        "apiKeyConfigured": s.has_api_key,
        "authenticated": ctx.auth.is_authenticated,
    }


@router.get("/settings")
async def get_settings(ctx: CoachContext = Depends(get_context)):
    return _settings_view(ctx)


@router.put("/settings")
async def update_settings(request: SettingsRequest, ctx: CoachContext = Depends(get_context)):
    """Save settings. Changing the client id signs the user out."""
    await run_blocking(
        ctx.update_settings,
        spreadsheet_id=request.spreadsheet_id,
        client_id=request.client_id,
        api_key=request.api_key,
    )
    return _settings_view(ctx)


@router.get("/auth/status")
async def auth_status(ctx: CoachContext = Depends(get_context)):
    return {
        "authenticated": ctx.auth.is_authenticated,
        "clientConfigured": ctx.settings.has_client,
    }


@router.get("/auth/login")
async def login(ctx: CoachContext = Depends(get_context)):
    """Start the consent flow; the frontend redirects the user to ``authUrl``."""
    try:
        return {"authUrl": ctx.auth.consent_url()}
    except CoachingError as e:
        raise_for_error(e)


@router.get("/auth/callback")
async def auth_callback(
    code: str = Query(...),
    state: str = Query(...),
    ctx: CoachContext = Depends(get_context),
):
    """OAuth redirect target; exchanges the code for a token."""
    try:
        await run_blocking(ctx.auth.exchange_code, code, state)
    except CoachingError as e:
        raise_for_error(e)
    return {"authenticated": ctx.auth.is_authenticated}


@router.post("/auth/logout")
async def logout(ctx: CoachContext = Depends(get_context)):
    ctx.auth.logout()
    return {"authenticated": False}
