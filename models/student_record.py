from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass
class StudentRecord:
    """In-memory representation of a row in the students table.

    Attributes:
        id: Primary key assigned by the store (None for new records).
        name: Student name.
        date_of_birth: Date of birth as an ISO ``YYYY-MM-DD`` string.
        contact: Free-form contact details.
        image: Filename of the uploaded image, a client supplied fallback, or None.
    """

    id: Optional[int]
    name: Optional[str] = None
    date_of_birth: Optional[str] = None
    contact: Optional[str] = None
    image: Optional[str] = None

    def as_params(self) -> Tuple[Optional[str], ...]:
        """Return the mutable column values in table order."""
        return (self.name, self.date_of_birth, self.contact, self.image)


@dataclass
class StoredUpload:
    """An image accepted and written by the upload handler."""

    filename: str
    content_type: str
    size: int = 0


MAX_STUDENT_ID = 2**63 - 1
_ID_PATTERN = re.compile(r"[0-9]+")


def parse_student_id(raw: object) -> Optional[int]:
    """Return `raw` as a student id, or None unless it is plain digits within SQLite's INTEGER range."""
    if not isinstance(raw, str) or not _ID_PATTERN.fullmatch(raw):
        return None
    student_id = int(raw)
    return student_id if student_id <= MAX_STUDENT_ID else None
