from sqlalchemy import Column, String, Boolean, Float, Integer

from farmguard.constants.pipeline import DETECTION_DETECTED, DETECTION_SOURCE_MANUAL
from farmguard.models.base import BaseSchema


class AnimalDetection(BaseSchema):
    __tablename__ = "animal_detections"

    animal_type = Column(String(100), nullable=False, index=True)  # normalized code, e.g. wild_boar
    distance = Column(Float, nullable=True)  # meters
    confidence = Column(Float, nullable=False, default=0.0)  # 0-1
    status = Column(String(20), nullable=False, default=DETECTION_DETECTED)
    deterrent_activated = Column(Boolean, nullable=False, default=False)

    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    source = Column(String(20), nullable=False, default=DETECTION_SOURCE_MANUAL)
    report_id = Column(String, nullable=True, index=True)


class DeterrentSetting(BaseSchema):
    __tablename__ = "deterrent_settings"

    is_enabled = Column(Boolean, nullable=False, default=False)
    auto_activate = Column(Boolean, nullable=False, default=False)
    volume = Column(Integer, nullable=False, default=70)  # 0-100
    sound_type = Column(String(50), nullable=False, default="ultrasonic")
    activation_distance = Column(Float, nullable=False, default=50.0)  # meters
