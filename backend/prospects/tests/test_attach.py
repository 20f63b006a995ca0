import datetime

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from core.exceptions import TokenExpired
from core.models import Company
from pickups.models import PickupRequest
from pickups.services import create_pickup_request
from purchases.services import create_purchase_request

from ..models import Prospect, ProspectStatus
from ..services import attach_guest_requests, get_or_create_prospect, get_prospect_by_token


def _pickup(email, phone):
    return create_pickup_request({
        "contact_email": email,
        "contact_phone": phone,
        "pickup_address": "Zone industrielle de Kossodo",
        "pickup_city": "Ouagadougou",
        "pickup_country": "BF",
        "requested_date": timezone.localdate() + datetime.timedelta(days=2),
    })


def _purchase(email, phone):
    return create_purchase_request({
        "contact_email": email,
        "contact_phone": phone,
        "product_name": "Solar inverter 3kW",
        "delivery_address": "Quartier Sarfalao",
        "delivery_city": "Bobo-Dioulasso",
        "delivery_country": "BF",
    })


class ProspectTests(TestCase):
    def test_prospect_reuse_refreshes_invitation(self):
        first = get_or_create_prospect("Fatou@Example.com", "+226 70 00 00 01", "Fatou")
        old_token = first.invitation_token
        Prospect.objects.filter(pk=first.pk).update(invitation_expires_at=timezone.now() - datetime.timedelta(days=1))

        again = get_or_create_prospect("fatou@example.com", "", "", "Fatou & Fils")
        self.assertEqual(again.pk, first.pk)
        self.assertNotEqual(again.invitation_token, old_token)
        self.assertGreater(again.invitation_expires_at, timezone.now())
        self.assertEqual(again.phone, "+22670000001")
        self.assertEqual(again.company_name, "Fatou & Fils")
        self.assertEqual(Prospect.objects.count(), 1)

    def test_expired_invitation_is_marked_and_rejected(self):
        prospect = get_or_create_prospect("late@example.com")
        Prospect.objects.filter(pk=prospect.pk).update(invitation_expires_at=timezone.now() - datetime.timedelta(hours=1))

        with self.assertRaises(TokenExpired):
            get_prospect_by_token(prospect.invitation_token)
        prospect.refresh_from_db()
        self.assertEqual(prospect.status, ProspectStatus.EXPIRED)
        self.assertIsNone(get_prospect_by_token("does-not-exist"))

    def test_invitation_endpoint(self):
        prospect = get_or_create_prospect("new@example.com", "+22670000002", "Ali")
        _pickup("new@example.com", "+22670000002")
        prospect.refresh_from_db()

        res = APIClient().get(f"/api/prospects/invitation/{prospect.invitation_token}")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["email"], "new@example.com")
        self.assertEqual(res.json()["pickup_count"], 1)
        self.assertEqual(APIClient().get("/api/prospects/invitation/nope").status_code, 404)


class AttachGuestRequestsTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.company = Company.objects.create(name="Sankara Import")
        cls.user = get_user_model().objects.create_user(
            "mariam", email="Mariam@Example.com", password="pass", role="CLIENT",
            company=cls.company, phone="+226 71 11 11 11",
        )

    def test_attaches_by_email_or_phone(self):
        by_email = _pickup("MARIAM@example.com", "+22699999999")
        by_phone = _purchase("other-address@example.com", "+22671111111")
        unrelated = _pickup("someone@example.com", "+22670000009")

        result = attach_guest_requests(self.user)

        self.assertEqual(result["pickups"], [by_email.tracking_number])
        self.assertEqual(result["purchases"], [by_phone.tracking_number])
        self.assertEqual(result["prospects_converted"], 2)

        by_email.refresh_from_db()
        self.assertTrue(by_email.is_attached_to_account)
        self.assertEqual(by_email.created_by, self.user)
        self.assertEqual(by_email.client, self.company)
        log = by_email.logs.get(event_type="ATTACHED_TO_ACCOUNT")
        self.assertEqual(log.metadata["matched_by"], "email")
        self.assertEqual(log.old_status, log.new_status)
        self.assertEqual(by_phone.logs.get(event_type="ATTACHED_TO_ACCOUNT").metadata["matched_by"], "phone")

        unrelated.refresh_from_db()
        self.assertFalse(unrelated.is_attached_to_account)
        prospect = Prospect.objects.get(email="mariam@example.com")
        self.assertEqual(prospect.status, ProspectStatus.CONVERTED)
        self.assertEqual(prospect.converted_user, self.user)

    def test_second_run_attaches_nothing(self):
        _pickup("mariam@example.com", "+22671111111")
        attach_guest_requests(self.user)
        result = attach_guest_requests(self.user)
        self.assertEqual(result["pickups"], [])
        self.assertEqual(PickupRequest.objects.get().logs.filter(event_type="ATTACHED_TO_ACCOUNT").count(), 1)

    def test_attached_requests_become_visible_to_the_account(self):
        pickup = _pickup("mariam@example.com", "+22671111111")
        client = APIClient()
        client.force_authenticate(user=self.user)
        self.assertEqual(client.get(f"/api/pickups/{pickup.pk}/").status_code, 404)

        res = client.post("/api/accounts/attach-guest-requests/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["attached"], 1)
        self.assertEqual(client.get(f"/api/pickups/{pickup.pk}/").status_code, 200)

    def test_endpoint_requires_authentication(self):
        self.assertIn(APIClient().post("/api/accounts/attach-guest-requests/").status_code, (401, 403))
