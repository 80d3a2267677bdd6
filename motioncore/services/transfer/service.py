"""
Data IO Service - JSON backup, restore and bulk delete.

Export writes one versioned package per kind to a JSON file (atomic
temp file + rename). Import reads a package, checks the version, maps
every item and only then inserts them all in the current transaction,
so a failing import never leaves a partial restore behind.
"""
import json
import tempfile
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from motioncore.core.config import Settings, get_settings
from motioncore.core.errors import (
    AccessDeniedError,
    DecodingError,
    DeleteError,
    GeneralDataIOError,
    NoDataToExportError,
    UnsupportedVersionError,
)
from motioncore.core.logging import TransferLogger, get_logger
from motioncore.models.types import WorkoutType
from motioncore.services.store import SessionStore
from motioncore.services.transfer.mapper import (
    DecodeWarning,
    ImportDecoder,
    TransferKind,
    get_mapper,
)
from motioncore.services.transfer.schemas import ExportEnvelope

logger = get_logger(__name__)


@dataclass
class ExportResult:
    path: Path
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"path": str(self.path), "filename": self.path.name, "count": self.count}


@dataclass
class ImportResult:
    imported: int
    warnings: List[DecodeWarning] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"imported": self.imported, "warnings": [w.to_dict() for w in self.warnings]}


def write_json_atomic(path: Path, payload: Dict[str, Any]) -> None:
    """Write pretty-printed, key-sorted UTF-8 JSON via a temp file in the target directory."""
    path.parent.mkdir(parents=True, exist_ok=True)
    text = json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False) + "\n"

    with tempfile.NamedTemporaryFile(
        "w", dir=path.parent, suffix=".tmp", delete=False, encoding="utf-8"
    ) as tmp:
        tmp.write(text)
        temp_path = Path(tmp.name)
    temp_path.replace(path)


class DataIOService:
    """
    Service for exporting, importing and deleting workout data.

    Usage:
        service = DataIOService(db)
        result = await service.export(TransferKind.CARDIO)
        result = await service.import_file(TransferKind.CARDIO, result.path)
    """

    def __init__(self, db: AsyncSession, settings: Optional[Settings] = None):
        self.db = db
        self.settings = settings or get_settings()
        self.store = SessionStore(db)
        self.transfer_logger = TransferLogger(logger, debug=self.settings.TRANSFER_DEBUG_LOG)

    @property
    def export_dir(self) -> Path:
        return Path(self.settings.EXPORT_DIR or tempfile.gettempdir())

    async def _fetch(self, kind: TransferKind) -> List[Any]:
        if kind == TransferKind.PLANS:
            return await self.store.list_plans()
        return await self.store.list(WorkoutType(kind.value))

    # ========================================
    # Export
    # ========================================

    def build_package(
        self,
        kind: TransferKind,
        entities: List[Any],
        exported_at: Optional[datetime] = None,
    ) -> ExportEnvelope:
        """
        Build the export package for already loaded entities.

        Raises:
            NoDataToExportError: If there is nothing to export
        """
        if not entities:
            raise NoDataToExportError()
        mapper = get_mapper(kind)
        return mapper.build_package(
            entities,
            version=self.settings.EXPORT_FORMAT_VERSION,
            exported_at=exported_at or datetime.now(),
        )

    async def export(self, kind: TransferKind, timestamp: Optional[int] = None) -> ExportResult:
        """
        Export every entity of a kind to a JSON file.

        Args:
            kind: Transfer kind
            timestamp: Unix epoch seconds for the filename (defaults to now)

        Returns:
            ExportResult with file path and item count
        """
        kind = TransferKind(kind)
        with self.transfer_logger.track("export", kind.value) as transfer:
            entities = await self._fetch(kind)
            package = self.build_package(kind, entities)
            transfer.set_items(len(package.items))

            epoch = timestamp if timestamp is not None else int(time.time())
            path = self.export_dir / self.settings.export_filename(kind.file_label, epoch)
            transfer.set_path(str(path))

            try:
                write_json_atomic(path, package.model_dump(mode="json"))
            except OSError as e:
                raise GeneralDataIOError(e) from e

            return ExportResult(path=path, count=len(package.items))

    # ========================================
    # Import
    # ========================================

    def decode_package(self, kind: TransferKind, raw: Union[bytes, str]) -> ExportEnvelope:
        """
        Parse and validate a package.

        Raises:
            DecodingError: Invalid JSON or wrong shape
            UnsupportedVersionError: Version other than the supported one
        """
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise DecodingError(cause=e) from e

        # Envelope before items: a newer format must fail as a version mismatch
        try:
            envelope = ExportEnvelope.model_validate(data)
        except ValidationError as e:
            raise DecodingError(cause=e) from e

        supported = self.settings.EXPORT_FORMAT_VERSION
        if envelope.version != supported:
            raise UnsupportedVersionError(envelope.version, supported)

        try:
            return get_mapper(kind).package_class.model_validate(data)
        except ValidationError as e:
            raise DecodingError(cause=e) from e

    async def import_bytes(self, kind: TransferKind, raw: Union[bytes, str]) -> ImportResult:
        """
        Import a package from raw file content.

        Every item is inserted as a new entity; existing data is not merged.
        """
        kind = TransferKind(kind)
        with self.transfer_logger.track("import", kind.value) as transfer:
            return await self._import(kind, raw, transfer)

    async def import_file(self, kind: TransferKind, path: Union[str, Path]) -> ImportResult:
        """
        Import a package from a file.

        Raises:
            AccessDeniedError: The file cannot be opened
        """
        kind = TransferKind(kind)
        path = Path(path)
        with self.transfer_logger.track("import", kind.value) as transfer:
            transfer.set_path(str(path))
            try:
                raw = path.read_bytes()
            except OSError as e:
                raise AccessDeniedError(cause=e) from e
            return await self._import(kind, raw, transfer)

    async def _import(self, kind: TransferKind, raw: Union[bytes, str], transfer: Any) -> ImportResult:
        package = self.decode_package(kind, raw)

        decoder = ImportDecoder()
        entities = get_mapper(kind).from_package(package, decoder)
        for index, entity in enumerate(entities):
            transfer.add_item(index, entity_id=str(entity.id))
        for warning in decoder.warnings:
            transfer.add_warning(warning.message)

        try:
            await self.store.add_all(entities)
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise GeneralDataIOError(e) from e

        transfer.set_items(len(entities))
        return ImportResult(imported=len(entities), warnings=decoder.warnings)

    # ========================================
    # Delete
    # ========================================

    async def delete_all(self, kind: TransferKind) -> int:
        """
        Delete every entity of a kind.

        Returns:
            Number of deleted entities
        """
        kind = TransferKind(kind)
        with self.transfer_logger.track("delete", kind.value) as transfer:
            try:
                count = await self.store.delete_many(await self._fetch(kind))
            except SQLAlchemyError as e:
                await self.db.rollback()
                raise DeleteError(e) from e
            transfer.set_items(count)
            return count
