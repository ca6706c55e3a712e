"""Server-rendered dashboard fragments."""
from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

from utils.classnames import cn

router = APIRouter()

LOADING_TEXT = "Carregando..."


def render_loading(extra_classes: str = "") -> str:
    """Centered spinner with the loading label."""
    container = cn("flex h-full min-h-[200px] items-center justify-center", extra_classes)
    spinner = cn(
        "h-8 w-8 animate-spin rounded-full border-4",
        "border-primary border-t-transparent",
    )
    label = cn("text-sm text-muted-foreground")
    return (
        f'<div class="{container}">'
        f'<div class="{cn("flex flex-col items-center gap-2")}">'
        f'<div class="{spinner}" role="status" aria-label="{LOADING_TEXT}"></div>'
        f'<p class="{label}">{LOADING_TEXT}</p>'
        "</div>"
        "</div>"
    )


@router.get("/loading", response_class=HTMLResponse)
async def dashboard_loading() -> HTMLResponse:
    """Placeholder shown while dashboard data loads."""
    return HTMLResponse(content=render_loading())
