from __future__ import annotations

import uuid

import pytest
from fastapi.testclient import TestClient

from shoppilot.app import app
from shoppilot.auth.users import is_suspended, user_id_for
from shoppilot.errors import InvalidQuery
from shoppilot.settings.service import DEFAULT_SETTINGS, SettingsService, get_settings_service
from shoppilot.shops.store import get_shop_store
from shoppilot.tests.helpers import LAGOS_LAT, LAGOS_LNG, login, login_admin, login_owner


def _admin_client() -> TestClient:
    c = TestClient(app)
    login_admin(c)
    return c


# ── Settings service ─────────────────────────────────────────────────────


def test_initialize_keeps_existing_values():
    service = SettingsService()
    service.set("maxShopsPerUser", 9)
    service.initialize()
    assert service.get("maxShopsPerUser") == 9
    assert service.get("backupFrequency") == "daily"


def test_get_falls_back_to_default_before_initialize():
    service = SettingsService()
    assert service.get("autoApproveShops") is False
    assert service.get("unknown") is None


def test_all_lists_every_default():
    assert set(SettingsService().all()) == {d["key"] for d in DEFAULT_SETTINGS}


def test_reset_restores_defaults():
    service = SettingsService()
    service.set("maintenanceMode", True)
    service.reset()
    assert service.get("maintenanceMode") is False


@pytest.mark.parametrize("key, value", [
    ("maxShopsPerUser", "lots"),
    ("maxShopsPerUser", True),
    ("maxShopsPerUser", -1),
    ("maintenanceMode", "false"),
    ("backupFrequency", 7),
])
def test_set_rejects_values_of_the_wrong_type(key, value):
    service = SettingsService()
    with pytest.raises(InvalidQuery):
        service.set(key, value)
    assert service.get(key) == next(d["value"] for d in DEFAULT_SETTINGS if d["key"] == key)


def test_unknown_keys_are_stored_as_is():
    service = SettingsService()
    service.set("welcomeBanner", "Hello")
    assert service.get("welcomeBanner") == "Hello"


# ── Settings endpoints ───────────────────────────────────────────────────


def test_get_settings():
    resp = _admin_client().get("/admin/settings")
    assert resp.status_code == 200
    assert resp.json()["settings"]["maxShopsPerUser"] == 5


def test_update_settings():
    resp = _admin_client().put("/admin/settings", json={"maxShopsPerUser": 2, "autoApproveShops": True})
    assert resp.status_code == 200
    assert resp.json()["settings"] == {"maxShopsPerUser": 2, "autoApproveShops": True}
    assert get_settings_service().get("maxShopsPerUser") == 2


def test_bad_setting_is_400_and_shop_creation_keeps_working():
    resp = _admin_client().put(
        "/admin/settings", json={"autoApproveShops": True, "maxShopsPerUser": "lots"},
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "Invalid setting value"
    # Nothing from the rejected batch was applied
    assert get_settings_service().get("autoApproveShops") is False
    assert get_settings_service().get("maxShopsPerUser") == 5

    owner = TestClient(app)
    login_owner(owner)
    resp = owner.post("/shops", json={
        "name": "Mama Put", "description": "Local dishes", "address": "12 Market Road",
        "location": {"type": "Point", "coordinates": [LAGOS_LNG, LAGOS_LAT]},
    })
    assert resp.status_code == 201


# ── Shop moderation ──────────────────────────────────────────────────────


def test_admin_lists_pending_shops(make_shop):
    make_shop("Live")
    make_shop("Pending", approved=False)
    body = _admin_client().get("/admin/shops").json()
    assert body["count"] == 2


def test_approve_shop(make_shop):
    shop = make_shop(approved=False)
    resp = _admin_client().put(f"/admin/shops/{shop.id}/approve")
    assert resp.status_code == 200
    assert resp.json()["shop"]["approved"] is True
    assert get_shop_store().get(shop.id).approved is True


def test_approve_unknown_shop_is_404():
    assert _admin_client().put("/admin/shops/nope/approve").status_code == 404


def test_admin_update_can_toggle_approval(make_shop):
    shop = make_shop(approved=True)
    resp = _admin_client().put(f"/admin/shops/{shop.id}", json={"approved": False, "name": "Renamed"})
    assert resp.json()["shop"]["approved"] is False
    assert resp.json()["shop"]["name"] == "Renamed"


def test_admin_delete_shop(make_shop):
    shop = make_shop()
    c = _admin_client()
    assert c.delete(f"/admin/shops/{shop.id}").status_code == 200
    assert c.delete(f"/admin/shops/{shop.id}").status_code == 404


# ── User suspension ──────────────────────────────────────────────────────


def test_suspend_and_unsuspend_user():
    c = TestClient(app)
    email = f"{uuid.uuid4().hex[:8]}@example.com"
    c.post("/auth/register", json={"name": "Tunde", "email": email, "password": "secret1"})
    user_id = user_id_for(email)

    admin = _admin_client()
    resp = admin.put(f"/admin/users/{user_id}/suspend", json={"suspend": True})
    assert resp.status_code == 200
    assert resp.json()["message"] == "User suspended successfully"
    assert is_suspended(user_id)
    assert login(TestClient(app), email, "secret1").status_code == 403

    admin.put(f"/admin/users/{user_id}/suspend", json={"suspend": False})
    assert login(TestClient(app), email, "secret1").status_code == 200


def test_suspend_unknown_user_is_404():
    resp = _admin_client().put("/admin/users/nope/suspend", json={"suspend": True})
    assert resp.status_code == 404
