from copy import deepcopy

import pytest
from django.contrib.auth import get_user_model
from django.core.management import call_command
from rest_framework.test import APIClient

from ..models import TransportRate
from ..services.config_service import DEFAULT_CONFIG

pytestmark = pytest.mark.django_db


def _mk_user_and_client(role="ADMIN", username=None):
    User = get_user_model()
    user = User.objects.create_user(username=username or role.lower(), password="pass", role=role)
    client = APIClient()
    client.force_authenticate(user=user)
    return user, client


def _estimate_payload(**overrides):
    payload = {
        "origin_country": "FR",
        "destination_country": "BF",
        "transport_modes": ["ROAD"],
        "priority": "EXPRESS",
        "packages": [{"description": "Cartons", "quantity": 2, "weight": "10", "cargo_type": "GENERAL"}],
    }
    payload.update(overrides)
    return payload


def test_public_estimate():
    call_command("seed_pricing_config", "--no-rates")
    res = APIClient().post("/api/pricing/estimate", _estimate_payload(), format="json")
    assert res.status_code == 200, res.content
    body = res.json()
    # 10 kg x 0.50 x 2 = 10.00, express +50%
    assert body["total_before_priority"] == "10.00"
    assert body["total_price"] == "15.00"
    assert body["estimated_delivery_days"] == 7
    assert body["lines"][0]["unit_price"] == "5.0000"


def test_estimate_without_config_is_service_unavailable():
    res = APIClient().post("/api/pricing/estimate", _estimate_payload(), format="json")
    assert res.status_code == 503
    assert "detail" in res.json()


def test_estimate_validation_errors_are_field_level():
    call_command("seed_pricing_config", "--no-rates")
    res = APIClient().post("/api/pricing/estimate", _estimate_payload(packages=[], transport_modes=["HOVERCRAFT"]), format="json")
    assert res.status_code == 400
    errors = res.json()["errors"]
    assert "packages" in errors
    assert "transport_modes" in errors


def test_config_read_for_staff_write_for_admin():
    call_command("seed_pricing_config", "--no-rates")
    _, finance = _mk_user_and_client("FINANCE_MANAGER")
    _, admin = _mk_user_and_client("ADMIN")
    _, client = _mk_user_and_client("CLIENT")

    assert finance.get("/api/pricing/config").status_code == 200
    assert client.get("/api/pricing/config").status_code == 403
    assert finance.put("/api/pricing/config", {"default_rate_per_kg": "2"}, format="json").status_code == 403

    res = admin.put("/api/pricing/config", {"default_rate_per_kg": "2"}, format="json")
    assert res.status_code == 200, res.content
    assert res.json()["version"] == 2
    assert res.json()["updated_by"] == "admin"


def test_config_put_rejects_partial_map():
    _, admin = _mk_user_and_client("ADMIN")
    assert admin.put("/api/pricing/config", deepcopy(DEFAULT_CONFIG), format="json").status_code == 200

    res = admin.put("/api/pricing/config", {"priority_surcharges": {"STANDARD": "0"}}, format="json")
    assert res.status_code == 400
    assert "priority_surcharges" in res.json()["errors"]


def test_transport_rate_crud_is_admin_only():
    _, ops = _mk_user_and_client("OPERATIONS_MANAGER")
    _, admin = _mk_user_and_client("ADMIN")
    payload = {"origin_country": "ci", "destination_country": "bf", "transport_mode": "ROAD", "rate_per_kg": "0.4000"}

    assert ops.post("/api/pricing/transport-rates/", payload, format="json").status_code == 403
    res = admin.post("/api/pricing/transport-rates/", payload, format="json")
    assert res.status_code == 201, res.content
    assert res.json()["origin_country"] == "CI"

    rate_id = res.json()["id"]
    assert ops.get("/api/pricing/transport-rates/").status_code == 200

    res = admin.post(f"/api/pricing/transport-rates/{rate_id}/toggle/")
    assert res.status_code == 200
    assert res.json()["is_active"] is False
    assert TransportRate.objects.get(pk=rate_id).is_active is False


def test_route_rate_changes_estimate():
    call_command("seed_pricing_config", "--no-rates")
    TransportRate.objects.create(origin_country="FR", destination_country="BF", transport_mode="ROAD", rate_per_kg="1.5")
    res = APIClient().post("/api/pricing/estimate", _estimate_payload(priority="STANDARD"), format="json")
    assert res.status_code == 200
    assert res.json()["total_price"] == "30.00"
    assert res.json()["rate_sources"] == {"ROAD": "ROUTE"}
