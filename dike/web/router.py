"""Web UI routes: serve the built single-page frontend.

Files under ``settings.static_dir`` are returned as-is; any other non-API path
gets ``index.html`` so client-side routing works on reload.
"""

from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter
from fastapi.responses import FileResponse

from dike.core.config import settings
from dike.core.exceptions import NotFoundError

web_router = APIRouter(tags=["web"])


@web_router.get("/{full_path:path}", include_in_schema=False)
async def spa(full_path: str):
    if full_path == "api" or full_path.startswith("api/"):
        raise NotFoundError("Not found")

    root = Path(settings.static_dir).resolve()
    if full_path:
        candidate = (root / full_path).resolve()
        if candidate.is_relative_to(root) and candidate.is_file():
            return FileResponse(candidate)

    index = root / "index.html"
    if not index.is_file():
        raise NotFoundError("Frontend build not found")
    return FileResponse(index)
