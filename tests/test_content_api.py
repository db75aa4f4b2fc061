import pytest

from tests.helpers import ADMIN_ID, ADMIN_PASSWORD, login


def test_read_missing_key_returns_empty_row(super_client):
    r = super_client.get("/api/content?key=company")
    assert r.status_code == 200
    assert r.get_json()["data"] == {"key": "company", "title": "", "subtitle": "", "body": "", "hero_image_url": ""}


def test_write_then_read(super_client):
    r = super_client.patch(
        "/api/content",
        json={"key": "company", "title": "About", "subtitle": "Since 1990", "body": "<p>hi</p>"},
    )
    assert r.status_code == 200
    data = super_client.get("/api/content?key=company").get_json()["data"]
    assert (data["title"], data["subtitle"], data["body"]) == ("About", "Since 1990", "<p>hi</p>")
    assert data["updated_at"]


def test_default_key_is_home(super_client):
    super_client.patch("/api/content", json={"title": "Home page"})
    assert super_client.get("/api/content").get_json()["data"]["title"] == "Home page"


def test_anonymous_write_is_401(client):
    r = client.patch("/api/content", json={"key": "home", "title": "x"})
    assert r.status_code == 401


def test_admin_default_allow_list_is_section_slugs(admin_client):
    assert admin_client.patch("/api/content", json={"key": "company", "title": "x"}).status_code == 200
    assert admin_client.patch("/api/content", json={"key": "company_style", "body": "{}"}).status_code == 200
    assert admin_client.patch("/api/content", json={"key": "home", "title": "x"}).status_code == 403


def test_admin_cannot_read_disallowed_key(admin_client):
    assert admin_client.get("/api/content?key=home").status_code == 403


def test_environment_allow_list(make_app):
    app = make_app(ADMIN_ALLOWED_KEYS=["home"])
    c = app.test_client()
    login(c, ADMIN_ID, ADMIN_PASSWORD)
    assert c.patch("/api/content", json={"key": "home", "title": "x"}).status_code == 200
    assert c.patch("/api/content", json={"key": "company", "title": "x"}).status_code == 403


@pytest.mark.parametrize("key", ["admin_policy", "inquiry_123", "analytics_2024-01-01"])
def test_reserved_keys_not_writable_even_by_super(super_client, key):
    r = super_client.patch("/api/content", json={"key": key, "body": "{}"})
    assert r.status_code == 403


def test_overlong_key_is_400(super_client):
    assert super_client.patch("/api/content", json={"key": "k" * 201}).status_code == 400


def test_non_object_body_is_400(super_client):
    assert super_client.patch("/api/content", json=["home"]).status_code == 400
