"""Fingerprint store reader.

Reads every fingerprint record under the selected profile areas of a
target directory into a frozen :class:`FingerprintStore` snapshot.
Records are parsed in a thread pool; the build tool may be writing to
the same directories, so any entry may vanish while it is being read.
"""

import logging
import time
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType

from targetgc.errors import FormatError
from targetgc.models.conditions import Condition, ConditionKind
from targetgc.models.unit import FingerprintRecord, RecordKey
from targetgc.store.layout import (
    FINGERPRINT_DIR,
    discover_areas,
    hashed_dir_hash,
    select_areas,
)
from targetgc.store.record import SUPPORTED_RECORD_VERSION, is_supported_version, read_record

logger = logging.getLogger(__name__)

DEFAULT_JOBS = 8


@dataclass(frozen=True, slots=True)
class FingerprintStore:
    """Frozen snapshot of the fingerprint records of a target directory.

    Attributes:
        target_dir: Target directory that was read.
        areas: Profile areas that were read, sorted.
        records: Records by key.
        conditions: Per-entry anomalies met while reading.
        started_at: Epoch time the read started. Anything modified later
            than this may belong to a record the snapshot does not know.
    """

    target_dir: str
    areas: tuple[str, ...]
    records: Mapping[RecordKey, FingerprintRecord]
    conditions: tuple[Condition, ...]
    started_at: float

    @property
    def unparseable(self) -> tuple[FingerprintRecord, ...]:
        """Records that could not be fully parsed, sorted by key."""
        return tuple(r for _, r in sorted(self.records.items()) if not r.is_parsed)


@dataclass(frozen=True, slots=True)
class _ReadOutcome:
    key: RecordKey
    record: FingerprintRecord | None
    declared_version: object
    vanished: bool = False


class FingerprintStoreReader:
    """Reads fingerprint records from a target directory.

    Args:
        target_dir: Target directory to read.
        profiles: Profile selectors; empty means every area present.
        jobs: Number of worker threads used to parse records.
    """

    def __init__(
        self,
        target_dir: Path,
        *,
        profiles: tuple[str, ...] = (),
        jobs: int = DEFAULT_JOBS,
    ) -> None:
        self._target_dir = target_dir
        self._profiles = profiles
        self._jobs = max(1, jobs)

    def read(self) -> FingerprintStore:
        """Read every record of the selected areas.

        Returns:
            Frozen FingerprintStore snapshot.

        Raises:
            FormatError: If the target directory does not have the
                supported layout.
        """
        started_at = time.time()
        areas = self._resolve_areas()

        keys: list[RecordKey] = []
        for area in areas:
            keys.extend(self._list_record_keys(area))

        logger.debug("Reading %d fingerprint record(s) from %d area(s)", len(keys), len(areas))
        with ThreadPoolExecutor(max_workers=self._jobs) as pool:
            outcomes = list(pool.map(self._read_one, keys))

        records: dict[RecordKey, FingerprintRecord] = {}
        conditions: list[Condition] = []
        versions: dict[str, list[object]] = {area: [] for area in areas}

        for outcome in outcomes:
            if outcome.vanished or outcome.record is None:
                conditions.append(
                    Condition(
                        ConditionKind.ENTRY_VANISHED,
                        str(outcome.key),
                        "fingerprint directory removed while reading",
                    )
                )
                continue
            record = outcome.record
            records[outcome.key] = record
            if outcome.declared_version is not None:
                versions[outcome.key.area].append(outcome.declared_version)
            if not record.is_parsed:
                logger.warning("Unparseable fingerprint record %s: %s", outcome.key, record.error)
                conditions.append(
                    Condition(
                        ConditionKind.UNPARSEABLE_RECORD, str(outcome.key), record.error or ""
                    )
                )

        self._check_versions(versions)

        return FingerprintStore(
            target_dir=str(self._target_dir),
            areas=tuple(areas),
            records=MappingProxyType(records),
            conditions=tuple(conditions),
            started_at=started_at,
        )

    def _resolve_areas(self) -> list[str]:
        """Find and select the profile areas to read.

        Raises:
            FormatError: If the target directory or its areas are missing.
        """
        if not self._target_dir.is_dir():
            msg = f"Target directory does not exist: {self._target_dir}"
            raise FormatError(msg)

        try:
            available = discover_areas(self._target_dir)
        except OSError as e:
            msg = f"Cannot list target directory {self._target_dir}: {e}"
            raise FormatError(msg) from e

        if not available:
            msg = (
                f"No profile directory with a {FINGERPRINT_DIR} area found under "
                f"{self._target_dir}; this does not look like a supported target directory"
            )
            raise FormatError(msg)

        return select_areas(available, self._profiles)

    def _list_record_keys(self, area: str) -> list[RecordKey]:
        """List fingerprint directories of an area that follow the naming convention."""
        fingerprint_dir = self._target_dir / area / FINGERPRINT_DIR
        try:
            children = sorted(fingerprint_dir.iterdir())
        except FileNotFoundError as e:
            msg = f"Fingerprint area vanished: {fingerprint_dir}"
            raise FormatError(msg) from e
        except OSError as e:
            msg = f"Cannot list fingerprint area {fingerprint_dir}: {e}"
            raise FormatError(msg) from e

        keys: list[RecordKey] = []
        for child in children:
            if hashed_dir_hash(child.name) is None:
                logger.debug("Ignoring unrecognized fingerprint entry: %s", child)
                continue
            if child.is_dir() and not child.is_symlink():
                keys.append(RecordKey(area=area, name=child.name))
        return keys

    def _read_one(self, key: RecordKey) -> _ReadOutcome:
        """Read a single record, tolerating concurrent removal."""
        record_dir = self._target_dir / key.area / FINGERPRINT_DIR / key.name
        try:
            record, version = read_record(record_dir, key)
        except FileNotFoundError:
            logger.info("Fingerprint directory vanished: %s", record_dir)
            return _ReadOutcome(key=key, record=None, declared_version=None, vanished=True)
        except OSError as e:
            record = FingerprintRecord(
                key=key, metadata=None, dependencies=None, error=f"cannot list record: {e}"
            )
            return _ReadOutcome(key=key, record=record, declared_version=None)

        if not record.is_parsed and not record_dir.exists():
            logger.info("Fingerprint directory vanished: %s", record_dir)
            return _ReadOutcome(key=key, record=None, declared_version=None, vanished=True)
        return _ReadOutcome(key=key, record=record, declared_version=version)

    @staticmethod
    def _check_versions(versions: dict[str, list[object]]) -> None:
        """Refuse areas whose records all declare an unsupported schema.

        A single record with a foreign or missing version is only
        unparseable; an area where no readable record declares the
        supported version was written by a build tool this collector does
        not understand.

        Raises:
            FormatError: If an area has declared versions, none supported.
        """
        for area, declared in sorted(versions.items()):
            if declared and not any(is_supported_version(v) for v in declared):
                found = sorted({repr(v) for v in declared})
                msg = (
                    f"Unsupported fingerprint schema in '{area}': found version(s) "
                    f"{', '.join(found)}, expected {SUPPORTED_RECORD_VERSION}"
                )
                raise FormatError(msg)
