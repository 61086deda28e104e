# Custom exceptions package
from farmguard.exceptions.base import (
    BaseErrorCode,
    DBErrorCode,
    PipelineErrorCode,
    EnumException,
    GenericSchemaException
)
from farmguard.exceptions.pipeline import (
    ReportNotPending,
    ReportProcessingFailed,
    UnsupportedLanguage,
    InvalidImageReference,
    ImageFetchError
)

__all__ = [
    'BaseErrorCode',
    'DBErrorCode',
    'PipelineErrorCode',
    'EnumException',
    'GenericSchemaException',
    'ReportNotPending',
    'ReportProcessingFailed',
    'UnsupportedLanguage',
    'InvalidImageReference',
    'ImageFetchError'
]
