"""Registry of the controller handlers served by the student routes.

Every route looks its handler up here by operation at request time, so a
handler that is missing (or re-bound later) only affects its own route.
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from fastapi import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

Handler = Callable[[Request], Awaitable[Response]]


class StudentOperation(str, enum.Enum):
    LIST = "list"
    GET_BY_ID = "get_by_id"
    ADD_FORM = "add_form"
    ADD = "add"
    EDIT_FORM = "edit_form"
    UPDATE = "update"
    DELETE = "delete"


class HandlerRegistry:
    """One optional handler slot per StudentOperation."""

    def __init__(self, handlers: Optional[Dict[StudentOperation, Handler]] = None) -> None:
        self._slots: Dict[StudentOperation, Optional[Handler]] = {op: None for op in StudentOperation}
        for op, handler in (handlers or {}).items():
            self.bind(op, handler)

    @classmethod
    def from_controller(cls, controller: Any) -> "HandlerRegistry":
        """Bind each operation to the controller attribute of the same name, if callable."""
        registry = cls()
        for op in StudentOperation:
            handler = getattr(controller, op.value, None)
            if callable(handler):
                registry.bind(op, handler)
        return registry

    def bind(self, operation: StudentOperation, handler: Handler) -> None:
        if not callable(handler):
            raise TypeError(f"Handler for {operation.value} must be callable")
        self._slots[operation] = handler

    def unbind(self, operation: StudentOperation) -> None:
        self._slots[operation] = None

    def get(self, operation: StudentOperation) -> Optional[Handler]:
        return self._slots[operation]

    def missing(self) -> List[StudentOperation]:
        return [op for op, handler in self._slots.items() if handler is None]

    def warn_missing(self) -> List[StudentOperation]:
        """Log a warning for every unbound operation and return them."""
        missing = self.missing()
        for op in missing:
            logger.warning("StudentController.%s is missing or not a function", op.value)
        return missing
