"""Data models for targetgc.

This module exports the core data structures used throughout the application.
"""

from targetgc.models.conditions import Condition, ConditionKind
from targetgc.models.inventory import Category, Inventory, InventoryEntry, PathType
from targetgc.models.plan import Disposition, PlannedEntry, PlanReason, SweepPlan
from targetgc.models.report import DeletionResult, SweepReport
from targetgc.models.unit import FingerprintRecord, RecordKey, RecordMetadata, TargetKind, Unit

__all__ = [
    "Category",
    "Condition",
    "ConditionKind",
    "DeletionResult",
    "Disposition",
    "FingerprintRecord",
    "Inventory",
    "InventoryEntry",
    "PathType",
    "PlanReason",
    "PlannedEntry",
    "RecordKey",
    "RecordMetadata",
    "SweepPlan",
    "SweepReport",
    "TargetKind",
    "Unit",
]
