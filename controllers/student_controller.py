"""Controller for the student record pages."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.responses import PlainTextResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel, field_validator
from starlette.responses import Response

from dal.student_dal import StudentDAL
from models.student_record import StudentRecord, parse_student_id
from services.upload_handler import sanitize_filename
from utils.errors import BadRequestError

logger = logging.getLogger(__name__)


class StudentForm(BaseModel):
	"""Fields posted by the add/edit forms (urlencoded, multipart or JSON)."""

	name: Optional[str] = None
	dob: Optional[str] = None
	contact: Optional[str] = None
	image: Optional[str] = None
	currentImage: Optional[str] = None

	@field_validator("name", "dob", "contact", mode="before")
	@classmethod
	def _as_text(cls, value: Any) -> Optional[str]:
		return None if value is None else str(value)

	@field_validator("image", "currentImage", mode="before")
	@classmethod
	def _fallback_filename(cls, value: Any) -> Optional[str]:
		# Only non-blank strings count; file parts are handled by the upload step.
		if not isinstance(value, str) or not value.strip():
			return None
		return sanitize_filename(value.strip())

	@classmethod
	async def from_request(cls, request: Request) -> "StudentForm":
		"""Parse the request body once into a StudentForm."""
		if request.headers.get("content-type", "").startswith("application/json"):
			try:
				payload = await request.json()
			except ValueError as exc:
				raise BadRequestError("Malformed JSON body.") from exc
			if not isinstance(payload, dict):
				payload = {}
		else:
			form = await request.form()
			payload = {
				key: next((v for v in form.getlist(key) if isinstance(v, str)), None)
				for key in form.keys()
			}
		return cls.model_validate(payload)

	def to_record(self, image: Optional[str]) -> StudentRecord:
		return StudentRecord(
			id=None,
			name=self.name,
			date_of_birth=self.dob,
			contact=self.contact,
			image=image,
		)


def _not_found() -> PlainTextResponse:
	return PlainTextResponse("Student not found", status_code=404)


def _student_id(request: Request) -> Optional[int]:
	"""Path id as int, or None when it is not a valid id (treated as not found)."""
	return parse_student_id(request.path_params.get("id"))


def _uploaded_filename(request: Request) -> Optional[str]:
	upload = getattr(request.state, "upload", None)
	return upload.filename if upload else None


class StudentController:
	"""Request handlers for listing, viewing, creating, editing and deleting students.

	Store faults are not caught here; they propagate to the route wrapper and
	the centralized error responder.
	"""

	def __init__(self, dal: StudentDAL, templates: Jinja2Templates) -> None:
		self.dal = dal
		self.templates = templates

	def _render(self, request: Request, template: str, context: Dict[str, Any]) -> Response:
		return self.templates.TemplateResponse(request, template, context)

	async def list(self, request: Request) -> Response:
		students = await self.dal.list_all()
		return self._render(request, "index.html", {"students": students})

	async def get_by_id(self, request: Request) -> Response:
		student_id = _student_id(request)
		student = await self.dal.get_by_id(student_id) if student_id is not None else None
		if student is None:
			return _not_found()
		return self._render(request, "student.html", {"student": student})

	async def add_form(self, request: Request) -> Response:
		return self._render(request, "addStudent.html", {})

	async def edit_form(self, request: Request) -> Response:
		student_id = _student_id(request)
		student = await self.dal.get_by_id(student_id) if student_id is not None else None
		if student is None:
			return _not_found()
		return self._render(request, "editStudent.html", {"student": student})

	async def add(self, request: Request) -> Response:
		form = await StudentForm.from_request(request)
		record = form.to_record(image=_uploaded_filename(request) or form.image)
		student_id = await self.dal.create(record)
		logger.info("Created student %s", student_id)
		return RedirectResponse("/", status_code=303)

	async def update(self, request: Request) -> Response:
		student_id = _student_id(request)
		if student_id is None:
			return _not_found()
		form = await StudentForm.from_request(request)
		record = form.to_record(image=_uploaded_filename(request) or form.currentImage)
		if await self.dal.update(student_id, record) == 0:
			return _not_found()
		return RedirectResponse(f"/student/{student_id}", status_code=303)

	async def delete(self, request: Request) -> Response:
		student_id = _student_id(request)
		if student_id is None or await self.dal.delete(student_id) == 0:
			return _not_found()
		logger.info("Deleted student %s", student_id)
		return RedirectResponse("/", status_code=303)
