import json

import pytest

from corpsite.access_policy import (
    POLICY_KEY,
    ConfiguredKeysProvider,
    SectionDefaultsProvider,
    StoredPolicyProvider,
    base_key,
    can_edit,
    clean_keys,
    get_effective_allowed_keys,
    resolve_allowed_keys,
    set_allowed_keys,
)
from corpsite.content_repo import SiteContentRepo
from corpsite.db import get_session
from corpsite.errors import ValidationError
from corpsite.site_sections import SECTION_SLUGS


@pytest.fixture
def db(app):
    with app.app_context():
        s = get_session()
        try:
            yield s
        finally:
            s.close()


@pytest.mark.parametrize(
    "role,key,expected",
    [
        ("super", "anything", True),
        ("super", "admin_policy", True),
        ("admin", "home", True),
        ("admin", "home_extra", True),
        ("admin", "home_style", True),
        ("admin", "support", False),
        ("admin", "support_extra", False),
        ("admin", "_extra", False),
        ("admin", "home_other", False),
    ],
)
def test_can_edit(role, key, expected):
    assert can_edit(role, key, ["home", "company"]) is expected


def test_base_key():
    assert base_key("company_extra") == "company"
    assert base_key("company_style") == "company"
    assert base_key("company") is None
    assert base_key("_style") is None


def test_clean_keys_trims_and_dedupes():
    assert clean_keys([" home ", "", "home", "support", 3]) == ["home", "support", "3"]


def test_resolve_first_non_empty_provider_wins():
    providers = [ConfiguredKeysProvider(""), ConfiguredKeysProvider("a, b"), SectionDefaultsProvider()]
    assert resolve_allowed_keys(providers) == ["a", "b"]
    assert resolve_allowed_keys([ConfiguredKeysProvider(None), SectionDefaultsProvider()]) == list(SECTION_SLUGS)
    assert resolve_allowed_keys([]) == []


def test_stored_policy_wins_over_environment(make_app):
    app = make_app(ADMIN_ALLOWED_KEYS=["company"])
    with app.app_context():
        db = get_session()
        try:
            assert get_effective_allowed_keys(db) == ["company"]
            set_allowed_keys(db, ["home", "support"])
            assert get_effective_allowed_keys(db) == ["home", "support"]
        finally:
            db.close()


def test_environment_default_used_when_no_document(make_app):
    app = make_app(ADMIN_ALLOWED_KEYS="records, support")
    with app.app_context():
        db = get_session()
        try:
            assert get_effective_allowed_keys(db) == ["records", "support"]
        finally:
            db.close()


def test_section_slugs_when_nothing_configured(db):
    assert get_effective_allowed_keys(db) == list(SECTION_SLUGS)


@pytest.mark.parametrize(
    "body",
    ["{not json", json.dumps({"allowedContentKeys": []}), json.dumps({"other": 1}), json.dumps(["home"]), ""],
)
def test_unusable_document_falls_back(db, body):
    SiteContentRepo(db).upsert(POLICY_KEY, body=body)
    assert StoredPolicyProvider(db).allowed_keys() in (None, [])
    assert get_effective_allowed_keys(db) == list(SECTION_SLUGS)


def test_malformed_document_is_logged(db, caplog):
    SiteContentRepo(db).upsert(POLICY_KEY, body="{oops")
    get_effective_allowed_keys(db)
    assert "malformed admin_policy" in caplog.text


def test_set_allowed_keys_rejects_empty(db):
    with pytest.raises(ValidationError):
        set_allowed_keys(db, [" ", ""])
    assert SiteContentRepo(db).get(POLICY_KEY) is None


def test_set_allowed_keys_persists_cleaned_document(db):
    assert set_allowed_keys(db, ["home", " home", "company"]) == ["home", "company"]
    row = SiteContentRepo(db).get(POLICY_KEY)
    assert json.loads(row.body) == {"allowedContentKeys": ["home", "company"]}
    assert row.title == "admin policy"
