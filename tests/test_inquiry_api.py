import json

import pytest

from corpsite.content_repo import SiteContentRepo
from corpsite.db import get_session

INQUIRY = {"name": "홍길동", "phone": "010-1234-5678", "message": "견적 문의드립니다."}


def _submit(client, **overrides):
    return client.post("/api/inquiry", json={**INQUIRY, **overrides})


def test_public_submission_is_stored(app, client):
    r = _submit(client)
    assert r.status_code == 200
    assert r.get_json() == {"ok": True}
    with app.app_context():
        db = get_session()
        try:
            rows = SiteContentRepo(db).list_by_prefix("inquiry_")
        finally:
            db.close()
    assert len(rows) == 1
    body = json.loads(rows[0].body)
    assert body["status"] == "new"
    assert body["name"] == "홍길동"
    assert rows[0].subtitle == "010-1234-5678"


def test_rapid_submissions_get_distinct_keys(app, client):
    for i in range(3):
        assert _submit(client, message=f"m{i}").status_code == 200
    with app.app_context():
        db = get_session()
        try:
            assert len(SiteContentRepo(db).list_by_prefix("inquiry_")) == 3
        finally:
            db.close()


def test_missing_fields_is_400(client):
    assert _submit(client, phone="").status_code == 400


def test_honeypot_is_silently_dropped(super_client):
    assert _submit(super_client, website="http://spam.example").status_code == 200
    assert super_client.get("/api/admin/inquiries").get_json() == {"inquiries": []}


def test_super_lists_and_triages(super_client):
    _submit(super_client)
    items = super_client.get("/api/admin/inquiries").get_json()["inquiries"]
    assert len(items) == 1
    item = items[0]
    assert item["status"] == "new"
    assert item["message"] == "견적 문의드립니다."

    r = super_client.patch("/api/admin/inquiries", json={"key": item["key"], "status": "done", "note": "전화 완료"})
    assert r.status_code == 200
    item = super_client.get("/api/admin/inquiries").get_json()["inquiries"][0]
    assert (item["status"], item["note"]) == ("done", "전화 완료")

    assert super_client.delete(f"/api/admin/inquiries?key={item['key']}").status_code == 200
    assert super_client.get("/api/admin/inquiries").get_json() == {"inquiries": []}


def test_patch_validation(super_client):
    assert super_client.patch("/api/admin/inquiries", json={"key": "home", "status": "done"}).status_code == 400
    assert super_client.patch("/api/admin/inquiries", json={"key": "inquiry_1", "status": "maybe"}).status_code == 400
    r = super_client.patch("/api/admin/inquiries", json={"key": "inquiry_1", "status": "done"})
    assert r.status_code == 404
    assert r.get_json()["error"] == "not_found"


def test_delete_requires_inquiry_key(super_client):
    assert super_client.delete("/api/admin/inquiries?key=home").status_code == 400


def test_admin_cannot_see_inquiries(admin_client):
    assert admin_client.get("/api/admin/inquiries").status_code == 403


@pytest.mark.parametrize("payload", [["x"], "x"])
def test_non_object_submission_is_400(client, payload):
    r = client.post("/api/inquiry", json=payload)
    assert r.status_code == 400
    assert r.get_json()["error"] == "invalid"


def test_non_object_triage_is_400(super_client):
    assert super_client.patch("/api/admin/inquiries", json=["inquiry_1"]).status_code == 400
