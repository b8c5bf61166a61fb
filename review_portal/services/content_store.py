"""Binary content storage for uploaded assignment files.

The review workflow only needs a handful of operations on file content, so they
are expressed as the small ``ContentStore`` interface.  ``DatabaseContentStore``
keeps the bytes in the ``storedfile`` table next to the rest of the data; any
other blob store can be swapped in through the ``get_content_store`` dependency.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, BinaryIO, Callable, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from review_portal.config import settings
from review_portal.errors import DependencyFailure, NotFound, ValidationError
from review_portal.models import StoredFile

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


@dataclass
class FileDescriptor:
    id: str
    filename: str
    content_type: str
    length: int
    upload_date: datetime
    metadata: Dict[str, Any] = field(default_factory=dict)


class ContentStore:
    """Interface of a content store keyed by generated string ids."""

    def put(self, name: str, stream: BinaryIO, metadata: Dict[str, Any], content_type: str = "application/pdf") -> str:
        raise NotImplementedError

    def get(self, content_id: str) -> tuple[FileDescriptor, bytes]:
        raise NotImplementedError

    def describe(self, content_id: str) -> Optional[FileDescriptor]:
        raise NotImplementedError

    def delete(self, content_id: str) -> None:
        raise NotImplementedError

    def find_by_metadata(self, predicate: Callable[[Dict[str, Any]], bool]) -> List[FileDescriptor]:
        raise NotImplementedError


def _parse_id(content_id: str) -> int:
    try:
        return int(content_id)
    except (TypeError, ValueError):
        raise ValidationError("Invalid file id")


def _describe(row: StoredFile) -> FileDescriptor:
    return FileDescriptor(
        id=str(row.id),
        filename=row.filename,
        content_type=row.content_type,
        length=row.length,
        upload_date=row.upload_date,
        metadata=dict(row.file_metadata or {}),
    )


class DatabaseContentStore(ContentStore):
    """Content store backed by the ``storedfile`` table."""

    def __init__(self, session: Session, max_bytes: int = settings.MAX_UPLOAD_BYTES):
        self.session = session
        self.max_bytes = max_bytes

    def put(self, name: str, stream: BinaryIO, metadata: Dict[str, Any], content_type: str = "application/pdf") -> str:
        chunks = []
        size = 0
        while True:
            chunk = stream.read(CHUNK_SIZE)
            if not chunk:
                break
            size += len(chunk)
            if size > self.max_bytes:
                raise ValidationError("File is too large")
            chunks.append(chunk)
        if size == 0:
            raise ValidationError("File is empty")

        row = StoredFile(
            filename=name,
            content_type=content_type,
            length=size,
            file_metadata=dict(metadata),
            data=b"".join(chunks),
        )
        try:
            self.session.add(row)
            self.session.commit()
            self.session.refresh(row)
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("Failed to store file %s", name)
            raise DependencyFailure("File upload error") from exc

        logger.info("Stored file %s (%d bytes) as %s", name, size, row.id)
        return str(row.id)

    def _load(self, content_id: str) -> Optional[StoredFile]:
        file_id = _parse_id(content_id)
        try:
            return self.session.get(StoredFile, file_id)
        except SQLAlchemyError as exc:
            raise DependencyFailure("Error reading file") from exc

    def get(self, content_id: str) -> tuple[FileDescriptor, bytes]:
        row = self._load(content_id)
        if row is None:
            raise NotFound("File not found")
        return _describe(row), row.data

    def describe(self, content_id: str) -> Optional[FileDescriptor]:
        row = self._load(content_id)
        return _describe(row) if row is not None else None

    def delete(self, content_id: str) -> None:
        row = self._load(content_id)
        if row is None:
            raise NotFound("File not found")
        try:
            self.session.delete(row)
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise DependencyFailure("Error deleting file") from exc

    def find_by_metadata(self, predicate: Callable[[Dict[str, Any]], bool]) -> List[FileDescriptor]:
        stmt = select(
            StoredFile.id,
            StoredFile.filename,
            StoredFile.content_type,
            StoredFile.length,
            StoredFile.upload_date,
            StoredFile.file_metadata,
        )
        try:
            rows = self.session.exec(stmt).all()
        except SQLAlchemyError as exc:
            raise DependencyFailure("Error reading files") from exc

        found = []
        for file_id, filename, content_type, length, upload_date, metadata in rows:
            metadata = dict(metadata or {})
            if predicate(metadata):
                found.append(
                    FileDescriptor(
                        id=str(file_id),
                        filename=filename,
                        content_type=content_type,
                        length=length,
                        upload_date=upload_date,
                        metadata=metadata,
                    )
                )
        return found
