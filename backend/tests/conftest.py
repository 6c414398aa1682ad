import sys
from pathlib import Path

# Ensure the backend package root is on sys.path for direct pytest runs
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from io import BytesIO

import pytest
from PIL import Image

from settings import Settings


def png_bytes(color=(200, 30, 30), size=(8, 8)) -> bytes:
    buf = BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def image_bytes() -> bytes:
    return png_bytes()


@pytest.fixture
def catalogue(tmp_path):
    """A two-book catalogue with one cover image on disk."""
    images_dir = tmp_path / "images"
    images_dir.mkdir()
    (images_dir / "rayuela.png").write_bytes(png_bytes())
    library_file = tmp_path / "books_db.toml"
    library_file.write_text(
        """
[[Book]]
ID = 1
Title = "Rayuela"
Author = "Julio Cortázar"
Description = "Novela"
HasBeenRead = true
ImageNames = ["rayuela.png"]
AddedOn = "2023-10-01"
GoodreadsLink = "https://www.goodreads.com/book/show/53413"

[[Book]]
ID = 2
Title = "Ficciones"
Author = "Jorge Luis Borges"
HasBeenRead = false
AddedOn = 2023-10-02
""",
        encoding="utf-8",
    )
    return library_file, images_dir


@pytest.fixture
def test_settings(tmp_path, catalogue) -> Settings:
    library_file, images_dir = catalogue
    s = Settings()
    s.DB_MODE = "memory"
    s.MAIN_APP_USER = "admin@example.com"
    s.CAPTCHA_SITE_KEY = "site-key"
    s.CAPTCHA_SECRET_KEY = ""
    s.AUTH0_DOMAIN = "tenant.example.com"
    s.AUTH0_CLIENT_ID = "client-id"
    s.AUTH0_CLIENT_SECRET = "client-secret"
    s.AUTH0_CALLBACK_URL = "http://testserver/auth/callback"
    s.SESSION_SECRET = "test-secret"
    s.SQLITE_PATH = str(tmp_path / "library.db")
    s.LIBRARY_FILE = str(library_file)
    s.IMAGES_DIR = str(images_dir)
    s.ASSETS_DIR = str(tmp_path / "no-assets")
    return s


ADMIN_ID = "auth0|admin"


@pytest.fixture
def memory_dao(catalogue):
    from repositories import InMemoryBookDAO
    from services.library_loader import seed_from_catalogue

    library_file, images_dir = catalogue
    dao = InMemoryBookDAO()
    seed_from_catalogue(dao, library_file, str(images_dir))
    dao.add_user(ADMIN_ID, "admin@example.com", "Admin", "auth0")
    return dao


@pytest.fixture
def app(test_settings, memory_dao):
    from api.main import create_app

    return create_app(test_settings, memory_dao)


@pytest.fixture
def client(app):
    from fastapi.testclient import TestClient

    return TestClient(app, follow_redirects=False)


@pytest.fixture
def login(app):
    """Act as the given user id for routes that read the session user."""
    from api.dependencies import get_current_user_id

    def _login(user_id=ADMIN_ID):
        app.dependency_overrides[get_current_user_id] = lambda: user_id

    yield _login
    app.dependency_overrides.clear()
