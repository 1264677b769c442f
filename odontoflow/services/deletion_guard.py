"""
Two-step confirmation for deleting a patient record.
The record's name must be typed back exactly before removal is allowed.
"""
import logging
from enum import Enum
from typing import Optional

from ..schemas import PatientRecord

logger = logging.getLogger(__name__)


class GuardState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"


class DeletionGuard:
    def __init__(self):
        self.state = GuardState.IDLE
        self.target: Optional[PatientRecord] = None
        self.confirmation_text = ""

    def request(self, record: PatientRecord) -> None:
        """Stage a record for deletion and clear the confirmation field."""
        self.target = record
        self.confirmation_text = ""
        self.state = GuardState.PENDING

    def type_confirmation(self, text: str) -> bool:
        self.confirmation_text = text
        return self.can_confirm

    @property
    def can_confirm(self) -> bool:
        # Exact match: case-sensitive, no trimming
        return (
            self.state == GuardState.PENDING
            and self.target is not None
            and self.confirmation_text == self.target.name
        )

    def confirm(self) -> Optional[PatientRecord]:
        """
        Release the staged record for removal.
        Returns None and stays pending when the confirmation text does not match.
        """
        if not self.can_confirm:
            logger.debug("Deletion confirm ignored: confirmation text does not match")
            return None
        record = self.target
        self._reset()
        return record

    def cancel(self) -> None:
        self._reset()

    def _reset(self) -> None:
        self.state = GuardState.IDLE
        self.target = None
        self.confirmation_text = ""
