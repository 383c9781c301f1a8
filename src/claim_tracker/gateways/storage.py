"""Document storage: turns uploaded bytes into a reference URL."""

import re
import uuid
from abc import ABC, abstractmethod
from pathlib import Path

from claim_tracker.config.settings import get_upload_dir


class DocumentStorage(ABC):
    """Interface to the object-upload collaborator."""

    @abstractmethod
    def store_file(self, data: bytes, filename: str) -> str:
        """Persist data and return a reference URL."""


def _safe_name(filename: str) -> str:
    name = Path(filename or "").name
    name = re.sub(r"[^A-Za-z0-9._-]", "_", name).strip("._")
    return name or "document"


class LocalDocumentStorage(DocumentStorage):
    """Writes documents under a local directory and returns file:// URLs."""

    def __init__(self, root: str | None = None):
        self._root = Path(root or get_upload_dir())

    def store_file(self, data: bytes, filename: str) -> str:
        self._root.mkdir(parents=True, exist_ok=True)
        target = self._root / f"{uuid.uuid4().hex[:12]}-{_safe_name(filename)}"
        target.write_bytes(data)
        return target.resolve().as_uri()
