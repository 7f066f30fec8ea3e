import io
import os
import sys
import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from PIL import Image

# Ensure project root is on sys.path so 'producshine' is importable during tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("SUPABASE_DISABLED", "1")
os.environ.setdefault("SUPABASE_STORAGE_LOCAL_DIR", tempfile.mkdtemp(prefix="producshine-storage-"))


@pytest.fixture(autouse=True)
def memory_store():
    # every test starts from empty tables
    from producshine.infrastructure.database.backend_client import reset_memory_store

    reset_memory_store()
    yield
    reset_memory_store()


@pytest.fixture(scope="session")
def client() -> TestClient:
    # lazy import after env configured
    from producshine.main import create_app

    app = create_app()
    return TestClient(app)


@pytest.fixture()
def auth_header() -> dict[str, str]:
    # any token is accepted in disabled mode
    return {"Authorization": "Bearer test-token"}


@pytest.fixture()
def other_header() -> dict[str, str]:
    return {"Authorization": "Bearer someone-else"}


@pytest.fixture()
def backend():
    from producshine.infrastructure.database.backend_client import BackendClient

    return BackendClient(None)


def make_png_bytes(w=4, h=4, color=(128, 64, 32)) -> bytes:
    img = Image.new("RGB", (w, h), color)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture()
def png_bytes() -> bytes:
    return make_png_bytes()
