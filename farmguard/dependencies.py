from fastapi import Request

from farmguard.constants.languages import is_supported_language
from farmguard.exceptions import UnsupportedLanguage
from farmguard.managers import (
    ReportManager,
    AnimalDetectionManager,
    DeterrentSettingsManager,
    ActivityLogManager,
)
from farmguard.services.admin_stats import AdminStatsService
from farmguard.services.deterrent import DeterrentCascade
from farmguard.services.image import ImageService
from farmguard.services.report_processor import ReportProcessor


# Everything below is built once in create_app() and kept on app.state

def get_report_manager(request: Request) -> ReportManager:
    return request.app.state.report_manager


def get_detection_manager(request: Request) -> AnimalDetectionManager:
    return request.app.state.detection_manager


def get_deterrent_settings_manager(request: Request) -> DeterrentSettingsManager:
    return request.app.state.deterrent_settings_manager


def get_activity_manager(request: Request) -> ActivityLogManager:
    return request.app.state.activity_manager


def get_image_service(request: Request) -> ImageService:
    return request.app.state.image_service


def get_report_processor(request: Request) -> ReportProcessor:
    return request.app.state.report_processor


def get_deterrent_cascade(request: Request) -> DeterrentCascade:
    return request.app.state.deterrent_cascade


def get_admin_stats_service(request: Request) -> AdminStatsService:
    return request.app.state.admin_stats_service


def validate_language(language: str | None) -> str | None:
    if language is not None and not is_supported_language(language):
        raise UnsupportedLanguage(language)
    return language.lower() if language else language
