from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Response
import logging

from farmguard.dependencies import (
    get_report_manager,
    get_report_processor,
    get_image_service,
    validate_language,
)
from farmguard.managers import ReportManager
from farmguard.schemas.report import CaptureRequest, ProcessRequest, BulkDeleteRequest, ReportResponse
from farmguard.services.image import ImageService
from farmguard.services.report_processor import ReportProcessor

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/reports/capture", response_model=ReportResponse, status_code=201)
async def capture_report(
    payload: CaptureRequest,
    reports: ReportManager = Depends(get_report_manager),
    images: ImageService = Depends(get_image_service),
):
    """
    Store a captured image as a pending report.
    Nothing is analysed yet; call /reports/{id}/process for that.
    """
    language = validate_language(payload.language)
    image_url = images.validate_reference(payload.image_url)

    report = await reports.capture(image_url, crop_type=payload.crop_type, language=language)
    logger.info(f"📸 Captured report {report.uid} (crop={report.crop_type})")
    return ReportResponse.from_record(report)


@router.post("/reports/bulk-delete", status_code=204)
async def bulk_delete_reports(
    payload: BulkDeleteRequest,
    reports: ReportManager = Depends(get_report_manager),
):
    try:
        deleted = await reports.bulk_delete(payload.ids)
    except Exception as e:
        logger.error(f"Bulk delete failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete reports")
    logger.info(f"🗑️ Deleted {deleted}/{len(payload.ids)} reports")
    return Response(status_code=204)


@router.post("/reports/{report_id}/process", response_model=ReportResponse)
async def process_report(
    report_id: str,
    payload: Optional[ProcessRequest] = Body(None),
    processor: ReportProcessor = Depends(get_report_processor),
):
    """
    Workflow:
    1. Load the pending report (404 if missing, 409 if already processed).
    2. Analyse the image with the vision model.
    3. Compute overall health and average confidence.
    4. Mark the report complete, record the scan analytic and activity log.
    5. Run the deterrent cascade for any wildlife found.
    """
    language = validate_language(payload.language if payload else None)
    report = await processor.process(report_id, language=language)
    return ReportResponse.from_record(report)


@router.get("/reports", response_model=list[ReportResponse])
async def list_reports(reports: ReportManager = Depends(get_report_manager)):
    records = await reports.list_recent()
    return [ReportResponse.from_record(report) for report in records.items]


@router.get("/reports/{report_id}", response_model=ReportResponse)
async def get_report(report_id: str, reports: ReportManager = Depends(get_report_manager)):
    return ReportResponse.from_record(await reports.fetch(report_id))


@router.delete("/reports/{report_id}", status_code=204)
async def delete_report(report_id: str, reports: ReportManager = Depends(get_report_manager)):
    try:
        await reports.delete(report_id)
    except Exception as e:
        logger.error(f"Delete of report {report_id} failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete report")
    return Response(status_code=204)
