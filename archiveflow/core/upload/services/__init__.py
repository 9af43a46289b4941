"""Upload services."""
from .file_service import FileValidator, PayloadReader
from .transfer_service import ObjectUploader

__all__ = ['FileValidator', 'PayloadReader', 'ObjectUploader']
