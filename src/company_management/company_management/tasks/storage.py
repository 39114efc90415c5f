from __future__ import annotations

import logging
import os
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import FrozenSet, Optional

from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from ..core.constants import ALLOWED_SUBMISSION_EXTENSIONS
from ..core.exceptions import ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredFile:
    original_name: str
    path: str
    extension: str
    size: int


class SubmissionStorage:
    """Keeps task submission files on local disk under ``upload_dir``."""

    def __init__(
        self,
        upload_dir: str,
        *,
        max_bytes: int,
        allowed_extensions: FrozenSet[str] = ALLOWED_SUBMISSION_EXTENSIONS,
    ):
        self._upload_dir = os.path.abspath(upload_dir)
        self._max_bytes = int(max_bytes)
        self._allowed = frozenset(e.lower() for e in allowed_extensions)

    @property
    def upload_dir(self) -> str:
        return self._upload_dir

    @staticmethod
    def _extension(filename: str) -> str:
        return os.path.splitext(filename)[1].lstrip(".").lower()

    def save(self, upload: Optional[FileStorage], *, prefix: str) -> StoredFile:
        """Write ``upload`` to disk, then validate it.

        The extension is checked before anything is written; the size after.
        A file that fails the size check is removed before the error is raised.
        """

        if upload is None or not getattr(upload, "filename", ""):
            raise ValidationError("a completion file is required", ["completionFile"])

        # Raw name: secure_filename strips non-ASCII and may drop the dot.
        ext = self._extension(upload.filename or "")
        if ext not in self._allowed:
            allowed = ", ".join(sorted(self._allowed))
            raise ValidationError(f"only {allowed} files are allowed", ["completionFile"])
        original = secure_filename(upload.filename or "")
        if self._extension(original) != ext:
            original = f"submission.{ext}"

        os.makedirs(self._upload_dir, exist_ok=True)
        stamp = datetime.now().strftime("%Y%m%d%H%M%S")
        stored = f"{prefix}-{stamp}-{uuid.uuid4().hex[:8]}.{ext}"
        path = os.path.join(self._upload_dir, stored)
        upload.save(path)

        size = os.path.getsize(path)
        if size == 0 or size > self._max_bytes:
            self.delete_if_exists(path)
            if size == 0:
                raise ValidationError("the uploaded file is empty", ["completionFile"])
            raise ValidationError(
                f"file exceeds the {self._max_bytes // (1024 * 1024)}MB limit", ["completionFile"]
            )
        return StoredFile(original_name=original, path=path, extension=ext, size=size)

    def delete_if_exists(self, path: Optional[str]) -> bool:
        if not path:
            return False
        try:
            os.remove(path)
            return True
        except FileNotFoundError:
            return False
        except OSError:
            logger.exception("could not delete uploaded file %s", path)
            return False

    def exists(self, path: str) -> bool:
        return os.path.isfile(path)
