"""Async data access layer for the students table.

Provides `StudentDAL`, the record repository used by the controller. It
turns the five record operations into `StorageGateway` statements.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from dal.storage_gateway import StorageGateway
from models.student_record import StudentRecord


class StudentDAL:
    """Data access layer for student records.

    Write operations report "no such id" through an affected-row count of 0
    rather than an exception; callers must check it.
    """

    _COLUMNS = ("id", "name", "dob", "contact", "image")
    _COLUMN_LIST, _INSERT_COLUMNS = ", ".join(_COLUMNS), ", ".join(_COLUMNS[1:])

    def __init__(self, gateway: StorageGateway) -> None:
        self._gateway = gateway

    async def list_all(self) -> List[StudentRecord]:
        """Return every student in insertion order (empty list if none)."""
        result = await self._gateway.execute(
            f"SELECT {self._COLUMN_LIST} FROM students ORDER BY id"
        )
        return [self._row_to_record(r) for r in result.rows]

    async def get_by_id(self, student_id: int) -> Optional[StudentRecord]:
        """Return the StudentRecord for `student_id`, or None if not found."""
        result = await self._gateway.execute(
            f"SELECT {self._COLUMN_LIST} FROM students WHERE id = ?",
            (student_id,),
        )
        return self._row_to_record(result.rows[0]) if result.rows else None

    async def create(self, record: StudentRecord) -> int:
        """Insert a new row and return the id assigned by the store.

        Args:
            record: StudentRecord to insert. Its `id` is ignored.
        """
        result = await self._gateway.execute(
            f"INSERT INTO students ({self._INSERT_COLUMNS}) VALUES (?, ?, ?, ?)",
            record.as_params(),
        )
        return int(result.last_row_id)

    async def update(self, student_id: int, record: StudentRecord) -> int:
        """Overwrite all mutable fields of a row. Returns the affected-row count."""
        result = await self._gateway.execute(
            "UPDATE students SET name = ?, dob = ?, contact = ?, image = ? WHERE id = ?",
            (*record.as_params(), student_id),
        )
        return result.affected_rows

    async def delete(self, student_id: int) -> int:
        """Delete a row by id. Returns the affected-row count."""
        result = await self._gateway.execute(
            "DELETE FROM students WHERE id = ?", (student_id,)
        )
        return result.affected_rows

    @staticmethod
    def _row_to_record(row: Sequence[object]) -> StudentRecord:
        """Convert a DB row tuple into a StudentRecord."""
        return StudentRecord(
            id=row[0],
            name=row[1],
            date_of_birth=row[2],
            contact=row[3],
            image=row[4],
        )
