"""Fingerprint store module.

This module reads the build tool's on-disk fingerprint records and
knows the naming conventions of the target directory layout.
"""

from targetgc.store.layout import discover_areas, profiles_for_dir, select_areas
from targetgc.store.reader import FingerprintStore, FingerprintStoreReader
from targetgc.store.record import SUPPORTED_RECORD_VERSION, read_record

__all__ = [
    "SUPPORTED_RECORD_VERSION",
    "FingerprintStore",
    "FingerprintStoreReader",
    "discover_areas",
    "profiles_for_dir",
    "read_record",
    "select_areas",
]
