"""Domain models for the roster tool.

Configuration objects, the per-row StudentRecord, error records and the
result types returned by the consolidation and routing services.
"""

from .config_models import (
    ColumnLayout,
    ImageAsset,
    NotifyConfig,
    PartitionMap,
    RosterConfig,
    SmtpConfig,
    SourceConfig,
)
from .error_record import ErrorRecord
from .processing_result import ConsolidationResult, ItemOutcome, ItemStatus, RoutingResult
from .student_record import StudentName, StudentRecord

__all__ = [
    # Configuration models
    "ColumnLayout",
    "ImageAsset",
    "NotifyConfig",
    "PartitionMap",
    "RosterConfig",
    "SmtpConfig",
    "SourceConfig",
    # Processing models
    "ConsolidationResult",
    "ErrorRecord",
    "ItemOutcome",
    "ItemStatus",
    "RoutingResult",
    "StudentName",
    "StudentRecord",
]
