"""Disk storage for uploaded files (CVs and résumés)."""

from __future__ import annotations

import itertools
import os
import shutil
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import BinaryIO, Callable, Optional

from .logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class StoredFile:
    fieldname: str
    originalname: str
    filename: str
    path: str
    size: int
    mimetype: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


class FileIntake:
    """Writes one uploaded stream per call under ``upload_dir``.

    Files are named ``<field>-<epoch millis><ext>``. Creation is exclusive, so
    two uploads landing in the same millisecond get ``-1``, ``-2``... suffixes
    instead of overwriting each other.
    """

    def __init__(self, upload_dir: str | os.PathLike, clock: Callable[[], float] = time.time):
        self.upload_dir = Path(upload_dir)
        self._clock = clock

    def accept(
        self,
        field_name: str,
        stream: BinaryIO,
        original_name: Optional[str],
        content_type: Optional[str] = None,
    ) -> StoredFile:
        original = os.path.basename(original_name or "")
        ext = os.path.splitext(original)[1]
        stem = f"{field_name}-{int(self._clock() * 1000)}"
        self.upload_dir.mkdir(parents=True, exist_ok=True)

        for attempt in itertools.count():
            filename = f"{stem}{ext}" if attempt == 0 else f"{stem}-{attempt}{ext}"
            target = self.upload_dir / filename
            try:
                out = open(target, "xb")
            except FileExistsError:
                continue
            try:
                with out:
                    shutil.copyfileobj(stream, out)
            except BaseException:
                # no partial uploads left behind
                target.unlink(missing_ok=True)
                logger.error("upload write failed field=%s file=%s", field_name, filename)
                raise
            break

        stored = StoredFile(
            fieldname=field_name,
            originalname=original,
            filename=filename,
            path=str(target),
            size=target.stat().st_size,
            mimetype=content_type,
        )
        logger.info("stored upload field=%s file=%s size=%d", field_name, stored.filename, stored.size)
        return stored
