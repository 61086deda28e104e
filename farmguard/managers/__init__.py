from .base import BaseSchema, GenericManager, ListModel
from .reports import ReportManager
from .detections import AnimalDetectionManager, DeterrentSettingsManager, DeterrentSettingsSnapshot
from .activity import ActivityLogManager, ScanAnalyticManager

__all__ = [
    "BaseSchema", "GenericManager", "ListModel",
    "ReportManager",
    "AnimalDetectionManager", "DeterrentSettingsManager", "DeterrentSettingsSnapshot",
    "ActivityLogManager", "ScanAnalyticManager",
]
