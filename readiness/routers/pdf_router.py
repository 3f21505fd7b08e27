"""
readiness/routers/pdf_router.py
PDF export of report text (SEO / UX / conversion analysis and so on).
Uses reportlab's canvas; pages are laid out by services.report_renderer.
"""
from fastapi import APIRouter
from fastapi.responses import Response

from ..config import get_settings
from ..errors import AuditError, RenderError, ValidationError
from ..models import PdfRequest
from ..services.report_renderer import document_from_result, render_pdf

router = APIRouter(tags=["Reports"])


@router.post(
    "/pdf",
    response_class=Response,
    responses={200: {"content": {"application/pdf": {}}, "description": "The rendered report"}},
)
def export_pdf(payload: PdfRequest):
    """
    Render the report sections into a downloadable PDF.
    Sections missing from `result` are skipped; nothing is cached.
    """
    if payload.result is None:
        raise ValidationError("Missing result")
    document = document_from_result(payload.result)

    try:
        pdf_bytes = render_pdf(document)
    except AuditError:
        raise
    except Exception as e:
        raise RenderError(f"PDF generation failed: {e}") from e

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename={get_settings().pdf_filename}"},
    )
