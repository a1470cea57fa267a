import asyncio
import importlib
import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from dal.storage_gateway import StorageGateway
from dal.student_dal import StudentDAL
from routes.handler_registry import HandlerRegistry
from routes.student_route import build_router
from services.upload_handler import UploadHandler
from utils.config import Settings
from utils.database_init import AsyncDatabaseInitializer
from utils.error_responder import handle_exception, log_unhandled_async
from utils.errors import BadRequestError, StoreFault

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan manager that:
      - creates the students table if needed (`app.state.db_initializer`)
      - logs unobserved task faults instead of letting them pass silently
    """
    await app.state.db_initializer.ensure_database()

    loop = asyncio.get_running_loop()
    previous_handler = loop.get_exception_handler()
    loop.set_exception_handler(log_unhandled_async)
    logger.info("Server running on port %s", app.state.settings.port)

    try:
        yield
    finally:
        loop.set_exception_handler(previous_handler)


def _default_controller(settings: Settings, db_initializer: AsyncDatabaseInitializer) -> Optional[Any]:
    """
    Build the StudentController; if its module cannot be imported every route
    degrades to a 500 instead of the app failing to start.
    """
    try:
        module = importlib.import_module("controllers.student_controller")
    except ImportError as exc:
        logger.warning("controllers.student_controller could not be imported: %s", exc)
        return None

    templates = Jinja2Templates(directory=str(settings.templates_dir))
    dal = StudentDAL(StorageGateway(db_initializer))
    return module.StudentController(dal, templates)


def create_app(settings: Optional[Settings] = None, controller: Optional[Any] = None) -> FastAPI:
    """
    Create and configure the FastAPI application instance.

    Args:
        settings: Application settings; read from the environment when omitted.
        controller: Object exposing the student handlers; the database-backed
            StudentController is built when omitted.
    """
    settings = settings or Settings.from_env()
    logging.basicConfig(level=settings.log_level)

    app = FastAPI(lifespan=lifespan)
    app.state.settings = settings

    db_initializer = AsyncDatabaseInitializer(settings.database_dir, reset=settings.reset_database)
    app.state.db_initializer = db_initializer

    upload_handler = UploadHandler(settings.upload_dir)
    upload_handler.ensure_directory()
    app.state.upload_handler = upload_handler

    # Uploaded images are served back from the upload directory.
    app.mount("/images", StaticFiles(directory=settings.upload_dir), name="images")

    if controller is None:
        controller = _default_controller(settings, db_initializer)
    registry = HandlerRegistry.from_controller(controller)
    registry.warn_missing()
    app.state.handler_registry = registry

    app.add_exception_handler(BadRequestError, handle_exception)
    app.add_exception_handler(StoreFault, handle_exception)
    app.add_exception_handler(Exception, handle_exception)

    app.include_router(build_router())

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.port)
