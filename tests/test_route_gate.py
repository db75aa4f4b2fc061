import pytest

from corpsite.route_gate import RouteKind, classify
from corpsite.session_codec import SESSION_COOKIE_NAME
from tests.helpers import ADMIN_TOKEN, SUPER_TOKEN


@pytest.mark.parametrize(
    "path,kind,required",
    [
        ("/", RouteKind.UNPROTECTED, None),
        ("/company", RouteKind.UNPROTECTED, None),
        ("/administrator", RouteKind.UNPROTECTED, None),
        ("/api/inquiry", RouteKind.UNPROTECTED, None),
        ("/admin/login", RouteKind.UNPROTECTED, None),
        ("/admin/login/", RouteKind.UNPROTECTED, None),
        ("/api/admin/login", RouteKind.UNPROTECTED, None),
        ("/api/admin/logout", RouteKind.UNPROTECTED, None),
        ("/admin", RouteKind.PAGE, "admin"),
        ("/admin/", RouteKind.PAGE, "admin"),
        ("/admin/content/home", RouteKind.PAGE, "admin"),
        ("/admin/system", RouteKind.PAGE, "super"),
        ("/admin/system/backup", RouteKind.PAGE, "super"),
        ("/api/content", RouteKind.API, "admin"),
        ("/api/admin/me", RouteKind.API, "admin"),
        ("/api/admin/policy", RouteKind.API, "super"),
        ("/api/admin/accounts", RouteKind.API, "super"),
        ("/api/admin/backup", RouteKind.API, "super"),
        ("/api/admin/inquiries", RouteKind.API, "super"),
    ],
)
def test_classify(path, kind, required):
    decision = classify(path)
    assert decision.kind is kind
    assert decision.required == required


def test_anonymous_page_redirects_to_login_with_next(client):
    r = client.get("/admin")
    assert r.status_code == 302
    assert r.headers["Location"] == "/admin/login?next=%2Fadmin"


def test_admin_on_super_page_is_redirected(client):
    client.set_cookie(SESSION_COOKIE_NAME, f"admin:{ADMIN_TOKEN}")
    r = client.get("/admin/system")
    assert r.status_code == 302
    assert "next=%2Fadmin%2Fsystem" in r.headers["Location"]


def test_super_reaches_system_page(client):
    client.set_cookie(SESSION_COOKIE_NAME, f"super:{SUPER_TOKEN}")
    assert client.get("/admin/system").status_code == 200


def test_anonymous_api_gets_401_json(client):
    r = client.get("/api/admin/me")
    assert r.status_code == 401
    assert r.get_json()["error"] == "unauthorized"


def test_admin_on_super_api_gets_403(client):
    client.set_cookie(SESSION_COOKIE_NAME, f"admin:{ADMIN_TOKEN}")
    r = client.get("/api/admin/policy")
    assert r.status_code == 403
    assert r.get_json()["error"] == "forbidden"


def test_forged_role_cookie_is_anonymous(client):
    client.set_cookie(SESSION_COOKIE_NAME, f"super:{ADMIN_TOKEN}")
    assert client.get("/api/admin/policy").status_code == 401


def test_login_page_is_open(client):
    r = client.get("/admin/login")
    assert r.status_code == 200
    assert b'name="password"' in r.data


def test_public_pages_are_open(client):
    assert client.get("/").status_code == 200
    assert client.get("/company").status_code == 200


def test_token_rotation_applies_to_next_request(app, client):
    client.set_cookie(SESSION_COOKIE_NAME, f"admin:{ADMIN_TOKEN}")
    assert client.get("/api/admin/me").status_code == 200
    app.config["ADMIN_SESSION_TOKEN"] = "rotated"
    assert client.get("/api/admin/me").status_code == 401
