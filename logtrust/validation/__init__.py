"""
Batch validation of package log record signatures.
"""

from .model import PackageLogRecord
from .engine import ValidationEngine, validate, DEFAULT_PARALLEL_THRESHOLD

__all__ = [
    "PackageLogRecord",
    "ValidationEngine",
    "validate",
    "DEFAULT_PARALLEL_THRESHOLD",
]
