"""JSON document stores (load-all / save-all, keyed by user id)

STORAGE ARCHITECTURE:
- One JSON object per concern (progress, journal, meta), keyed by user id
- Reads never fail: a missing, unreadable or malformed file reads as {}
- Writes replace the whole file atomically; failures raise StorageWriteError
"""
import copy
import json
import logging
import os
import tempfile
from pathlib import Path

from src.exceptions import wrap_storage_exception

logger = logging.getLogger(__name__)


class JsonDocumentStore:
    """Whole-file JSON document backed by the local filesystem"""

    def __init__(self, path: Path):
        self.path = Path(path)

    @property
    def name(self) -> str:
        return str(self.path)

    def load_all(self) -> dict:
        """Read the whole document; degrade to {} on any problem"""
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read {self.path}, treating as empty: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Unexpected top-level {type(data).__name__} in {self.path}, treating as empty")
            return {}
        return data

    def save_all(self, data: dict) -> None:
        """Replace the whole document

        Raises:
            StorageWriteError: If the document cannot be serialized or written
        """
        tmp_name = None
        try:
            payload = json.dumps(data, ensure_ascii=False, indent=2)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                tmp.write(payload)
            os.replace(tmp_name, self.path)
            tmp_name = None
        except (OSError, TypeError, ValueError) as e:
            raise wrap_storage_exception(e, operation="save_all", store=self.name)
        finally:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
        logger.debug(f"Saved {len(data)} records to {self.path}")


class InMemoryDocumentStore:
    """Dict-backed document with the same contract (tests, local runs)"""

    def __init__(self, name: str = "memory", initial: dict | None = None):
        self._name = name
        self._data = copy.deepcopy(initial) if initial else {}

    @property
    def name(self) -> str:
        return self._name

    def load_all(self) -> dict:
        return copy.deepcopy(self._data)

    def save_all(self, data: dict) -> None:
        try:
            # Same serializability guarantee as the file store
            self._data = json.loads(json.dumps(data, ensure_ascii=False))
        except (TypeError, ValueError) as e:
            raise wrap_storage_exception(e, operation="save_all", store=self.name)
