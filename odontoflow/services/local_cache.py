"""
Local cache fallback.
Mirrors the whole patient collection to a JSON file so the dashboard keeps working
when the remote record store is unreachable or not configured.
"""
import json
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from pydantic import ValidationError

from ..core.config import settings
from ..schemas import PatientRecord

logger = logging.getLogger(__name__)


class LocalCache:
    """Key-value store of the full record collection, keyed by a fixed namespace."""

    def __init__(self, directory: Optional[str] = None, namespace: Optional[str] = None):
        self.directory = Path(directory or settings.LOCAL_CACHE_DIR)
        self.namespace = namespace or settings.LOCAL_CACHE_NAMESPACE

    @property
    def path(self) -> Path:
        return self.directory / f"{self.namespace}.json"

    def save(self, records: Sequence[PatientRecord]) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        data = [r.model_dump(mode="json") for r in records]
        tmp_path = self.path.with_suffix(".tmp")
        tmp_path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
        tmp_path.replace(self.path)

    def load(self) -> List[PatientRecord]:
        """Return the cached collection, or an empty one if absent or unreadable."""
        if not self.path.exists():
            return []
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            return [PatientRecord.model_validate(item) for item in raw]
        except (OSError, ValueError, TypeError, ValidationError) as exc:
            logger.warning("Local cache %s is unreadable, starting empty: %s", self.path, exc)
            return []

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
