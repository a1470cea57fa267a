import io
import os
import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from starlette.datastructures import Headers, UploadFile

# Keep the module-level app in main.py away from the project directories.
_SCRATCH = Path(tempfile.mkdtemp(prefix="student-records-"))
os.environ.setdefault("DATABASE_DIR", str(_SCRATCH / "database"))
os.environ.setdefault("UPLOAD_DIR", str(_SCRATCH / "images"))

from dal.storage_gateway import StorageGateway  # noqa: E402
from dal.student_dal import StudentDAL  # noqa: E402
from main import create_app  # noqa: E402
from utils.config import Settings  # noqa: E402
from utils.database_init import AsyncDatabaseInitializer  # noqa: E402


@pytest.fixture
def settings(tmp_path):
    return Settings(
        port=3000,
        database_dir=tmp_path / "database",
        upload_dir=tmp_path / "public" / "images",
    )


@pytest.fixture
def db_initializer(settings):
    return AsyncDatabaseInitializer(settings.database_dir)


@pytest.fixture
def gateway(db_initializer):
    return StorageGateway(db_initializer)


@pytest.fixture
def dal(gateway):
    return StudentDAL(gateway)


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_upload():
    """Build UploadFiles the way Starlette does when parsing multipart bodies."""

    def _make(filename, content_type, data=b"\x89PNG fake image bytes"):
        return UploadFile(
            file=io.BytesIO(data),
            filename=filename,
            headers=Headers({"content-type": content_type}),
        )

    return _make
