"""Models package: import all so they are registered with SQLAlchemy."""
from farmguard.models.report import Report
from farmguard.models.detection import AnimalDetection, DeterrentSetting
from farmguard.models.activity import ScanAnalytic, ActivityLog

__all__ = [
    'Report',
    'AnimalDetection',
    'DeterrentSetting',
    'ScanAnalytic',
    'ActivityLog',
]
