from sqlalchemy import Column, String, Float, Integer, Text

from farmguard.models.base import BaseSchema, JSONType


class ScanAnalytic(BaseSchema):
    __tablename__ = "scan_analytics"

    report_id = Column(String, nullable=False, index=True)
    category = Column(String(20), nullable=False)  # disease, insect, wildlife, healthy
    detection_name = Column(String(255), nullable=False)
    confidence = Column(Float, nullable=False)  # 0-1
    processing_time_ms = Column(Integer, nullable=False, default=0)


class ActivityLog(BaseSchema):
    __tablename__ = "activity_logs"

    action = Column(String(20), nullable=False, index=True)  # detection, irrigation, deterrent, system
    details = Column(Text, nullable=False)
    meta = Column(JSONType, nullable=False, default=lambda: {})
