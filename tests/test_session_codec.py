import pytest

from corpsite.session_codec import SESSION_COOKIE_NAME, decode_session, issue_session

TOKENS = {"admin": "a-secret", "super": "s-secret"}


@pytest.mark.parametrize("role", ["admin", "super"])
def test_issue_then_decode_returns_role(role):
    value = issue_session(role, TOKENS)
    assert value == f"{role}:{TOKENS[role]}"
    assert decode_session(value, TOKENS) == {"role": role}


def test_issue_without_token_signals_misconfiguration():
    assert issue_session("super", {"admin": "a-secret", "super": ""}) is None
    assert issue_session("admin", {}) is None


@pytest.mark.parametrize(
    "value",
    [
        None,
        "",
        "admin",
        "admin:",
        ":a-secret",
        "root:a-secret",
        "ADMIN:a-secret",
        "admin:a-secreT",
        "admin:s-secret",  # another role's token
        "super:a-secret",
        "admin:a-secret:extra",
        "admin a-secret",
    ],
)
def test_malformed_or_tampered_values_decode_to_none(value):
    assert decode_session(value, TOKENS) is None


def test_rotated_token_invalidates_existing_cookie():
    value = issue_session("admin", TOKENS)
    assert decode_session(value, {"admin": "rotated", "super": "s-secret"}) is None


def test_unset_token_never_matches_empty_segment():
    assert decode_session("admin:", {"admin": "", "super": ""}) is None
    assert decode_session("admin:x", {"admin": "", "super": ""}) is None


def test_codec_reads_tokens_from_app_config(app):
    with app.app_context():
        value = issue_session("super")
        assert value is not None
        assert decode_session(value) == {"role": "super"}
    # Outside an app context no tokens are configured
    assert decode_session(value) is None


def test_cookie_name():
    assert SESSION_COOKIE_NAME == "admin_session"
