"""FastAPI routes for student records.

Each route is wired through `resolve_handler`, which looks the controller
handler up in the app's HandlerRegistry on every request.
"""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse
from starlette.datastructures import UploadFile
from starlette.responses import Response

from models.student_record import parse_student_id
from routes.handler_registry import HandlerRegistry, StudentOperation
from services.upload_handler import UploadHandler
from utils.error_responder import error_response

logger = logging.getLogger(__name__)


async def _attach_upload(request: Request) -> None:
	"""Run the upload handler and expose the stored file as `request.state.upload`."""
	upload_handler: UploadHandler = request.app.state.upload_handler
	files = []
	if request.headers.get("content-type", "").startswith("multipart/form-data"):
		form = await request.form()
		files = [value for value in form.getlist("image") if isinstance(value, UploadFile)]
	request.state.upload = await upload_handler.handle(files)


def _has_valid_id(request: Request) -> bool:
	"""Routes without an id always qualify; an invalid id means the handler answers 404."""
	raw_id = request.path_params.get("id")
	return raw_id is None or parse_student_id(raw_id) is not None


def resolve_handler(operation: StudentOperation, accepts_upload: bool = False):
	"""Build the endpoint for `operation`.

	Args:
		operation: Controller operation served by the route.
		accepts_upload: Run the upload handler before the controller (write routes),
			unless the path id is invalid.

	Returns:
		An async endpoint taking the request. A missing handler yields a 500
		naming the operation; faults raised by the upload step or the handler
		are rendered by the error responder.
	"""

	async def endpoint(request: Request) -> Response:
		registry: HandlerRegistry = request.app.state.handler_registry
		handler = registry.get(operation)
		if handler is None:
			msg = f"Missing controller handler: {operation.value}"
			logger.warning(msg)
			return PlainTextResponse(msg, status_code=500)

		try:
			if accepts_upload and _has_valid_id(request):
				await _attach_upload(request)
			return await handler(request)
		except Exception as exc:  # pylint: disable=broad-exception-caught
			return error_response(request, exc)

	endpoint.__name__ = f"{operation.value}_route"
	return endpoint


def build_router() -> APIRouter:
	"""Return the router exposing the seven student routes."""
	router = APIRouter(tags=["students"])
	routes = (
		("GET", "/", StudentOperation.LIST, False),
		("GET", "/student/{id}", StudentOperation.GET_BY_ID, False),
		("GET", "/addStudent", StudentOperation.ADD_FORM, False),
		("POST", "/addStudent", StudentOperation.ADD, True),
		("GET", "/editStudent/{id}", StudentOperation.EDIT_FORM, False),
		("POST", "/editStudent/{id}", StudentOperation.UPDATE, True),
		("GET", "/deleteStudent/{id}", StudentOperation.DELETE, False),
	)
	for method, path, operation, accepts_upload in routes:
		router.add_api_route(
			path,
			resolve_handler(operation, accepts_upload),
			methods=[method],
			name=operation.value,
			include_in_schema=False,
		)
	return router
