"""Report routes: fetch a completed report as JSON or as a text download."""

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from ...dependencies import get_scan_lifecycle
from ...engine.scan_lifecycle import ScanLifecycle
from ...utils.report_template import download_filename, render_text_report, report_payload

router = APIRouter(prefix="/report", tags=["reports"])


@router.get("/{report_id}")
async def get_report(report_id: str, lifecycle: ScanLifecycle = Depends(get_scan_lifecycle)):
    record = lifecycle.get_report(report_id)
    return {"success": True, "report": report_payload(record)}


@router.get("/{report_id}/download")
async def download_report(report_id: str, lifecycle: ScanLifecycle = Depends(get_scan_lifecycle)):
    record = lifecycle.get_report(report_id)
    return PlainTextResponse(
        render_text_report(record),
        headers={"Content-Disposition": f'attachment; filename="{download_filename(record)}"'},
    )
