from unittest.mock import patch

from conftest import png_bytes


def _book_form(**overrides):
    form = {
        "title": "Bestiario",
        "author": "Julio Cortázar",
        "description": "Cuentos",
        "read": "on",
        "goodreadsLink": "https://example.com/bestiario",
    }
    form.update(overrides)
    return form


def test_books_count(client):
    assert client.get("/api/booksCount").json() == {"booksCount": 2}


def test_books_api_filters_by_author(client):
    data = client.get("/api/books", params={"start_with": "borges"}).json()
    assert [b["id"] for b in data] == [2]
    assert data[0]["title"] == "Ficciones"
    assert data[0]["images"] == []


def test_books_api_without_filter_returns_all_with_images(client):
    data = client.get("/api/books").json()
    assert {b["id"] for b in data} == {1, 2}
    rayuela = next(b for b in data if b["id"] == 1)
    assert rayuela["images"][0]["book_id"] == 1
    assert rayuela["images"][0]["image"]


def test_admin_pages_require_login(client):
    resp = client.get("/admin/add")
    assert resp.status_code == 401
    assert "log in" in resp.text


def test_admin_pages_reject_other_users(client, memory_dao, login):
    memory_dao.add_user("auth0|reader", "reader@example.com", "Reader", "auth0")
    login("auth0|reader")
    assert client.get("/admin/add").status_code == 403


def test_add_book_page_renders_captcha(client, login):
    login()
    resp = client.get("/admin/add")
    assert resp.status_code == 200
    assert 'data-sitekey="site-key"' in resp.text


def test_add_book_with_image(client, memory_dao, login):
    login()
    resp = client.post(
        "/addbook",
        data=_book_form(),
        files={"image": ("cover.png", png_bytes(), "image/png")},
    )
    assert resp.status_code == 200
    assert resp.text == "Book added successfully"
    book = memory_dao.get_book_by_id(3)
    assert book.title == "Bestiario"
    assert book.has_been_read is True
    assert book.goodreads_link == "https://example.com/bestiario"
    assert len(book.images) == 1


def test_add_book_without_image_and_unread(client, memory_dao, login):
    login()
    form = _book_form()
    del form["read"]
    assert client.post("/addbook", data=form).status_code == 200
    book = memory_dao.get_book_by_id(3)
    assert book.has_been_read is False
    assert book.images == []


def test_add_book_rejects_non_image_upload(client, memory_dao, login):
    login()
    resp = client.post(
        "/addbook",
        data=_book_form(),
        files={"image": ("notes.txt", b"just text", "text/plain")},
    )
    assert resp.status_code == 400
    assert memory_dao.get_book_count() == 2


def test_add_book_rejects_blank_title(client, login):
    login()
    assert client.post("/addbook", data=_book_form(title="   ")).status_code == 400


def test_add_book_checks_captcha_when_configured(client, test_settings, memory_dao, login):
    login()
    test_settings.CAPTCHA_SECRET_KEY = "secret"
    form = _book_form()
    form["g-recaptcha-response"] = "token"

    with patch("api.dependencies.verify_captcha", return_value=False) as mock_verify:
        resp = client.post("/addbook", data=form)
    assert resp.status_code == 403
    assert mock_verify.call_args[0][:2] == ("secret", "token")
    assert memory_dao.get_book_count() == 2

    with patch("api.dependencies.verify_captcha", return_value=True):
        assert client.post("/addbook", data=form).status_code == 200
    assert memory_dao.get_book_count() == 3


def test_modify_page(client, login):
    login()
    resp = client.get("/admin/modify", params={"book_id": "1"})
    assert resp.status_code == 200
    assert 'value="Rayuela"' in resp.text
    assert client.get("/admin/modify", params={"book_id": "x"}).status_code == 400
    assert client.get("/admin/modify", params={"book_id": "99"}).status_code == 404


def test_modify_book_updates_and_appends_image(client, memory_dao, login):
    login()
    form = _book_form(book_id="2", title="Ficciones (1944)", author="Jorge Luis Borges")
    resp = client.post(
        "/modify",
        data=form,
        files={"image": ("cover.png", png_bytes((0, 0, 255)), "image/png")},
    )
    assert resp.status_code == 200
    assert resp.text == "Book modified successfully"
    book = memory_dao.get_book_by_id(2)
    assert book.title == "Ficciones (1944)"
    assert book.has_been_read is True
    assert len(book.images) == 1


def test_modify_unknown_book_is_not_found(client, login):
    login()
    assert client.post("/modify", data=_book_form(book_id="99")).status_code == 404


def test_remove_image(client, memory_dao, login):
    login()
    image_id = memory_dao.get_images_by_book_id(1)[0].image_id
    resp = client.post("/removeimage", data={"image_id": str(image_id)})
    assert resp.status_code == 200
    assert resp.text == "Image removed"
    assert memory_dao.get_images_by_book_id(1) == []
    assert client.post("/removeimage", data={"image_id": str(image_id)}).status_code == 404


def test_initdb_seeds_from_catalogue(client, login):
    login()
    assert client.get("/admin/initdb").json() == {"status": "OK"}


def test_initdb_reports_errors(client, test_settings, tmp_path, login):
    login()
    test_settings.LIBRARY_FILE = str(tmp_path / "missing.toml")
    assert client.get("/admin/initdb").json() == {"status": "error"}


def test_add_book_rejects_oversized_upload(client, test_settings, memory_dao, login):
    login()
    test_settings.MAX_UPLOAD_BYTES = 16
    resp = client.post(
        "/addbook",
        data=_book_form(),
        files={"image": ("cover.png", png_bytes(size=(32, 32)), "image/png")},
    )
    assert resp.status_code == 413
    assert memory_dao.get_book_count() == 2


def test_remove_image_and_initdb_require_admin(client, memory_dao, login):
    image_id = memory_dao.get_images_by_book_id(1)[0].image_id

    assert client.post("/removeimage", data={"image_id": str(image_id)}).status_code == 401
    assert client.get("/admin/initdb").status_code == 401

    memory_dao.add_user("auth0|reader", "reader@example.com", "Reader", "auth0")
    login("auth0|reader")
    assert client.post("/removeimage", data={"image_id": str(image_id)}).status_code == 403
    assert client.get("/admin/initdb").status_code == 403
    assert len(memory_dao.get_images_by_book_id(1)) == 1
