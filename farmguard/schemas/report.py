from datetime import datetime
from typing import Optional, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from farmguard.constants.languages import DEFAULT_LANGUAGE


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Requests ---

class CaptureRequest(CamelModel):
    image_url: str = Field(..., min_length=1, description="http(s) URL or data:image/...;base64 payload")
    crop_type: Optional[str] = Field(None, max_length=255)
    language: str = DEFAULT_LANGUAGE

    @field_validator('image_url')
    @classmethod
    def _strip(cls, v: str) -> str:
        return v.strip()


class ProcessRequest(CamelModel):
    language: Optional[str] = None


class BulkDeleteRequest(CamelModel):
    ids: list[str]


# --- API Response ---

class ReportResponse(CamelModel):
    id: str
    image_url: str
    status: str
    analysis: Optional[dict[str, Any]] = None
    severity: Optional[str] = None
    crop_type: str = "unknown"
    language: Optional[str] = DEFAULT_LANGUAGE
    created_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, report) -> "ReportResponse":
        return cls(
            id=report.uid,
            image_url=report.image_url,
            status=report.status,
            analysis=report.analysis,
            severity=report.severity,
            crop_type=report.crop_type or "unknown",
            language=report.language,
            created_at=report.created_at,
        )
