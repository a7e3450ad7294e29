"""Export endpoints for the text report and LMS import files."""

from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from dike.core.exceptions import NotFoundError
from dike.schemas.analysis import ExportRequest
from dike.services.exports import EXPORT_FORMATS

router = APIRouter(prefix="/export", tags=["export"])


@router.post("/{export_format}")
async def export_analysis(export_format: str, payload: ExportRequest):
    """Render the analysis as ``text``, ``canvas``, ``google-classroom`` or ``blackboard``."""
    fmt = EXPORT_FORMATS.get(export_format)
    if fmt is None:
        raise NotFoundError(f"Unknown export format: {export_format}")

    content = fmt.render(payload.analysis, payload.assignment_text)
    return StreamingResponse(
        iter([content]),
        media_type=fmt.media_type,
        headers={"Content-Disposition": f'attachment; filename="{fmt.filename}"'},
    )
