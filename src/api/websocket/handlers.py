"""WebSocket handlers for real-time video analysis progress."""

import asyncio
import json
import logging

from fastapi import WebSocket, WebSocketDisconnect

from ..transformers.frontend_transformer import transform_candidates
from ...application.ports.extraction_service import ProgressCallbackPort
from ...application.use_cases.analyze_video import (
    AnalyzeVideoRequest,
    AnalyzeVideoUseCase,
)

logger = logging.getLogger(__name__)


class WebSocketProgressCallback(ProgressCallbackPort):
    """Progress callback that sends updates via WebSocket."""

    def __init__(self, websocket: WebSocket):
        self._websocket = websocket

    async def report_progress(
        self, progress: int, message: str, status: str = "processing"
    ) -> None:
        """Send progress update via WebSocket."""
        await self._websocket.send_json({
            "status": status,
            "progress": progress,
            "message": message,
        })


async def _send_error(websocket: WebSocket, message: str, code: str | None = None) -> None:
    payload = {"status": "error", "progress": 0, "message": message}
    if code:
        payload["code"] = code
    await websocket.send_json(payload)


async def handle_analyze_websocket(websocket: WebSocket) -> None:
    """Handle WebSocket connection for video analysis.

    Expected client message format:
    {
        "action": "analyze",
        "videoUrl": "https://www.youtube.com/watch?v=...",
        "notes": "focus on laning"
    }

    Server sends progress updates:
    {
        "status": "connecting" | "processing" | "completed" | "error",
        "progress": 0-100,
        "message": "Human-readable status"
    }

    Args:
        websocket: FastAPI WebSocket connection
    """
    await websocket.accept()
    ctx = websocket.app.state.context

    try:
        data = await websocket.receive_json()

        action = data.get("action")
        if action != "analyze":
            await _send_error(websocket, f"Unknown action: {action}")
            return

        video_url = data.get("videoUrl")
        if not video_url:
            await _send_error(websocket, "videoUrl is required", "INVALID_REQUEST")
            return

        await websocket.send_json({
            "status": "connecting",
            "progress": 0,
            "message": "Initializing...",
        })

        progress_callback = WebSocketProgressCallback(websocket)
        use_case = AnalyzeVideoUseCase(ctx.analyzer)
        request = AnalyzeVideoRequest(video_url=video_url, notes=data.get("notes", ""))

        # The use case already reported the error through the callback.
        result = await use_case.execute(request, progress_callback)
        if not result.success:
            return

        await websocket.send_json({
            "status": "completed",
            "progress": 100,
            "message": "Analysis ready!",
            "title": result.title,
            "items": transform_candidates(result.items),
        })

        # Keep connection alive briefly for client to receive
        await asyncio.sleep(0.5)

    except WebSocketDisconnect:
        logger.info("Analysis client disconnected")
    except json.JSONDecodeError:
        await _send_error(websocket, "Invalid JSON message", "INVALID_REQUEST")
    except Exception as e:
        logger.exception("Video analysis over WebSocket failed")
        await _send_error(websocket, f"Error: {e}", "INTERNAL_ERROR")
    finally:
        try:
            await websocket.close()
        except RuntimeError:
            # Already closed by the client.
            pass
