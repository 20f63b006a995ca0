import datetime
from decimal import Decimal

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from core.models import Company

from ..models import Shipment, ShipmentStatus, TrackingEvent
from ..tracking import get_public_tracking, is_valid_tracking_number, status_label

pytestmark = pytest.mark.django_db

FORBIDDEN_KEYS = {
    "estimated_cost",
    "actual_cost",
    "currency",
    "internal_notes",
    "latitude",
    "longitude",
    "recorded_by",
    "created_by",
    "description",
    "quote",
}


def _walk_keys(value):
    if isinstance(value, dict):
        for key, inner in value.items():
            yield key
            yield from _walk_keys(inner)
    elif isinstance(value, list):
        for inner in value:
            yield from _walk_keys(inner)


def _shipment(number="SHP-20261019-00001", status=ShipmentStatus.IN_TRANSIT):
    company = Company.objects.create(name="Sahel Import")
    shipment = Shipment.objects.create(
        tracking_number=number,
        client=company,
        status=status,
        origin_country="FR",
        origin_city="Paris",
        destination_country="BF",
        destination_city="Ouagadougou",
        weight=Decimal("42.500"),
        package_count=3,
        transport_modes=["AIR"],
        estimated_cost=Decimal("310.00"),
        actual_cost=Decimal("298.40"),
        currency="EUR",
        internal_notes="Customer is late on two invoices",
    )
    TrackingEvent.objects.create(
        shipment=shipment,
        status=ShipmentStatus.APPROVED,
        location="Paris",
        description="Shipment registered",
        timestamp=timezone.now() - datetime.timedelta(days=2),
    )
    TrackingEvent.objects.create(
        shipment=shipment,
        status=ShipmentStatus.IN_TRANSIT,
        location="CDG cargo terminal",
        latitude=Decimal("49.009690"),
        longitude=Decimal("2.547925"),
        internal_notes="Pallet 2 re-wrapped",
        timestamp=timezone.now(),
    )
    return shipment


def test_public_view_exposes_no_internal_data():
    _shipment()
    view = get_public_tracking("SHP-20261019-00001")

    assert view["status"] == "IN_TRANSIT"
    assert view["status_label"] == "In transit"
    assert view["company_name"] == "Sahel Import"
    assert [e["location"] for e in view["events"]] == ["CDG cargo terminal", "Paris"]
    assert not FORBIDDEN_KEYS & set(_walk_keys(view))


def test_lookup_normalizes_case_and_whitespace():
    _shipment()
    assert get_public_tracking("  shp-20261019-00001 ")["tracking_number"] == "SHP-20261019-00001"


def test_draft_unknown_and_malformed_numbers_are_indistinguishable():
    _shipment(number="SHP-20261019-00002", status=ShipmentStatus.DRAFT)
    client = APIClient()

    responses = [
        client.get("/api/tracking/SHP-20261019-00002"),
        client.get("/api/tracking/SHP-20261019-99999"),
        client.get("/api/tracking/not-a-number"),
    ]
    assert {r.status_code for r in responses} == {404}
    assert len({r.content for r in responses}) == 1


def test_public_endpoint_needs_no_credentials():
    _shipment()
    res = APIClient().get("/api/tracking/SHP-20261019-00001")
    assert res.status_code == 200
    assert res.json()["tracking_number"] == "SHP-20261019-00001"


def test_tracking_number_format():
    assert is_valid_tracking_number("SHP-20261019-00001")
    assert not is_valid_tracking_number("SHP-2026101-00001")
    assert not is_valid_tracking_number("QTE-20261019-00001")
    assert not is_valid_tracking_number(None)


def test_every_status_has_a_label():
    for value in ShipmentStatus.values:
        assert status_label(value)
