from datetime import datetime
from typing import Optional

from farmguard.schemas.report import CamelModel


class CategoryCount(CamelModel):
    category: str
    count: int


class RecentScan(CamelModel):
    id: str
    report_id: str
    category: str
    name: str
    confidence: Optional[float] = None
    crop_type: str
    created_at: Optional[datetime] = None


class AdminStats(CamelModel):
    total_scans: int
    avg_confidence: float
    accuracy_rate: float
    category_breakdown: list[CategoryCount]
    recent_scans: list[RecentScan]


class AccuracyCorrection(CamelModel):
    correct_category: Optional[str] = None
    correct_name: Optional[str] = None
    notes: Optional[str] = None


class AccuracyCorrectionAck(CamelModel):
    message: str
    scan_id: str
    applied: bool = False


class AutomationStatus(CamelModel):
    window_hours: int
    mode: str  # active, monitoring, disabled
    deterrent_enabled: bool
    auto_activate: bool
    activation_distance: float
    detections_total: int
    detections_deterred: int
    activation_rate: float
    last_detection_at: Optional[datetime] = None
    scans_processed: int
    activity_counts: dict[str, int]
