"""
Exceptions raised along the capture -> analysis -> deterrent pipeline.
Distinguishes client mistakes, lifecycle conflicts and internal failures so the
HTTP layer can map each to the right status code.
"""
from farmguard.exceptions.base import EnumException, PipelineErrorCode


class ReportNotPending(EnumException):
    """Report already left the pending state (processed, or processed concurrently)"""

    def __init__(self, uid: str, status: str):
        super().__init__(409, PipelineErrorCode.REPORT_NOT_PENDING, err_kwargs={"uid": uid, "status": status})


class ReportProcessingFailed(EnumException):
    """Unexpected failure while processing; nothing was committed"""

    def __init__(self):
        super().__init__(500, PipelineErrorCode.REPORT_PROCESSING_FAILED)


class UnsupportedLanguage(EnumException):
    def __init__(self, language: str):
        super().__init__(400, PipelineErrorCode.UNSUPPORTED_LANGUAGE, err_kwargs={"language": language})


class InvalidImageReference(EnumException):
    def __init__(self, reason: str):
        super().__init__(400, PipelineErrorCode.INVALID_IMAGE, err_kwargs={"reason": reason})


class ImageFetchError(Exception):
    """Image bytes could not be obtained for analysis"""
    pass
