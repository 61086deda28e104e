"""
Tolerant models for the vision model's JSON payload.

The payload is only partially trustworthy: keys go missing, lists come back
as strings, confidences arrive as text or out of range. Every field here has a
structural default and a lenient pre-validator, so once a payload has been
through ``AnalysisResult`` the aggregation code can rely on a fully populated
shape.
"""
import math
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from farmguard.constants.pipeline import SEVERITY_LEVELS

SEVERITY_ALIASES = {
    'healthy': 'none',
    'mild': 'low',
    'minor': 'low',
    'moderate': 'medium',
    'severe': 'high',
    'extreme': 'critical',
}

UNAVAILABLE_SUMMARY = (
    "Analysis unavailable: the image could not be analysed. "
    "Please retake the photo in good light with the affected plants in focus."
)


def clamp_confidence(value: Any) -> Optional[float]:
    """Coerce a confidence to a float in [0, 100]; None when it is not a number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip().rstrip('%')
    try:
        value = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(value):
        return None
    return max(0.0, min(100.0, value))


def coerce_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in ('true', 'yes', 'y', '1')
    return False


def coerce_text(value: Any, default: str) -> str:
    if value is None or isinstance(value, (dict, list)):
        return default
    text = str(value).strip()
    return text or default


def coerce_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, (str, dict)):
        return [value]
    return []


class TolerantModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True, alias_generator=to_camel)


class Disease(TolerantModel):
    name: str = "Unknown disease"
    category: str = "unknown"
    confidence: Optional[float] = None
    symptoms: list[str] = Field(default_factory=list)

    @field_validator('name', 'category', mode='before')
    @classmethod
    def _text(cls, v, info):
        return coerce_text(v, cls.model_fields[info.field_name].default)

    @field_validator('confidence', mode='before')
    @classmethod
    def _confidence(cls, v):
        return clamp_confidence(v)

    @field_validator('symptoms', mode='before')
    @classmethod
    def _symptoms(cls, v):
        return [str(s) for s in coerce_list(v) if isinstance(s, (str, int, float))]


class Pest(TolerantModel):
    name: str = "Unknown pest"
    type: str = "unknown"
    lifestage: Optional[str] = None
    confidence: Optional[float] = None
    damage_type: Optional[str] = None

    @field_validator('name', 'type', mode='before')
    @classmethod
    def _text(cls, v, info):
        return coerce_text(v, cls.model_fields[info.field_name].default)

    @field_validator('lifestage', 'damage_type', mode='before')
    @classmethod
    def _optional_text(cls, v):
        return coerce_text(v, None)

    @field_validator('confidence', mode='before')
    @classmethod
    def _confidence(cls, v):
        return clamp_confidence(v)


class Animal(TolerantModel):
    type: str = "unknown"
    name: str = "Unknown animal"
    confidence: Optional[float] = None
    estimated_distance: Optional[float] = None  # meters
    location: Optional[str] = None
    count: int = 1
    threat_level: Optional[str] = None

    @field_validator('type', 'name', mode='before')
    @classmethod
    def _text(cls, v, info):
        return coerce_text(v, cls.model_fields[info.field_name].default)

    @field_validator('location', 'threat_level', mode='before')
    @classmethod
    def _optional_text(cls, v):
        return coerce_text(v, None)

    @field_validator('confidence', mode='before')
    @classmethod
    def _confidence(cls, v):
        return clamp_confidence(v)

    @field_validator('estimated_distance', mode='before')
    @classmethod
    def _distance(cls, v):
        if v is None or isinstance(v, bool):
            return None
        try:
            v = float(str(v).strip().rstrip('m').strip())
        except (TypeError, ValueError):
            return None
        if not math.isfinite(v) or v < 0:
            return None
        return v

    @field_validator('count', mode='before')
    @classmethod
    def _count(cls, v):
        try:
            return max(1, int(v))
        except (TypeError, ValueError, OverflowError):
            return 1


class AnalysisResult(TolerantModel):
    disease_detected: bool = False
    pests_detected: bool = False
    animals_detected: bool = False
    severity: str = "none"
    crop_type: str = "unknown"
    summary: str = ""

    diseases: list[Disease] = Field(default_factory=list)
    pests: list[Pest] = Field(default_factory=list)
    animals: list[Animal] = Field(default_factory=list)

    # Guidance is passed through untouched
    what_to_do_now: list[Any] = Field(default_factory=list)
    prevention: list[Any] = Field(default_factory=list)
    organic_options: list[Any] = Field(default_factory=list)
    chemical_options: list[Any] = Field(default_factory=list)

    degraded: bool = False

    @field_validator('disease_detected', 'pests_detected', 'animals_detected', 'degraded', mode='before')
    @classmethod
    def _flags(cls, v):
        return coerce_bool(v)

    @field_validator('severity', mode='before')
    @classmethod
    def _severity(cls, v):
        severity = coerce_text(v, "none").lower()
        severity = SEVERITY_ALIASES.get(severity, severity)
        return severity if severity in SEVERITY_LEVELS else "none"

    @field_validator('crop_type', 'summary', mode='before')
    @classmethod
    def _text(cls, v, info):
        return coerce_text(v, cls.model_fields[info.field_name].default)

    @field_validator('diseases', 'pests', 'animals', mode='before')
    @classmethod
    def _entries(cls, v):
        return [item for item in coerce_list(v) if isinstance(item, dict)]

    @field_validator('what_to_do_now', 'prevention', 'organic_options', 'chemical_options', mode='before')
    @classmethod
    def _guidance(cls, v):
        return coerce_list(v)

    @model_validator(mode='after')
    def _reconcile_flags(self):
        # A populated list wins over a contradicting flag
        self.disease_detected = self.disease_detected or bool(self.diseases)
        self.pests_detected = self.pests_detected or bool(self.pests)
        self.animals_detected = self.animals_detected or bool(self.animals)
        return self

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True)

    @classmethod
    def unavailable(cls) -> "AnalysisResult":
        return cls(summary=UNAVAILABLE_SUMMARY, degraded=True)
