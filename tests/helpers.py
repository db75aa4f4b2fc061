"""Shared credentials and request helpers for the test-suite."""

ADMIN_ID = "editor"
ADMIN_PASSWORD = "admin-pw-123"
SUPER_ID = "operator"
SUPER_PASSWORD = "super-pw-456"
ADMIN_TOKEN = "admin-token-abc"
SUPER_TOKEN = "super-token-xyz"


def login(client, login_id, password, **kwargs):
    return client.post("/api/admin/login", json={"id": login_id, "password": password}, **kwargs)
