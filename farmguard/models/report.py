from sqlalchemy import Column, String, Text

from farmguard.constants.pipeline import REPORT_PENDING
from farmguard.models.base import BaseSchema, JSONType


class Report(BaseSchema):
    __tablename__ = "reports"

    # BaseSchema provides: uid (str), created_at, updated_at, deleted_at

    # Inputs
    image_url = Column(Text, nullable=False)  # http(s) URI or data: URL
    language = Column(String(10), default="en")

    # Lifecycle
    status = Column(String(20), nullable=False, default=REPORT_PENDING, index=True)

    # Detection Results (populated by processing)
    severity = Column(String(20), nullable=True)
    crop_type = Column(String(255), nullable=False, default="unknown")

    # Data
    analysis = Column(JSONType, nullable=False, default=lambda: {})
