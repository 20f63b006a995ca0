import datetime
from io import StringIO
from decimal import Decimal
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.core.management import call_command
from django.db import IntegrityError
from django.db.models import F
from django.test import TestCase
from django.utils import timezone

from core.exceptions import InvalidRequest, StateConflict, TransitionDenied
from core.models import Company
from pricing.dataclasses import Route
from shipments.models import Shipment

from .. import services
from ..models import Quote, QuoteLog, QuoteStatus


def _transition_rows(quote):
    return list(
        quote.logs.exclude(old_status=None).exclude(old_status=F("new_status"))
        .order_by("id").values_list("old_status", "new_status")
    )


class QuoteWorkflowTests(TestCase):

    @classmethod
    def setUpTestData(cls):
        call_command("seed_pricing_config", "--no-rates", stdout=StringIO())
        User = get_user_model()
        cls.company = Company.objects.create(name="Sahel Import SARL", email="ops@sahel.example")
        cls.other_company = Company.objects.create(name="Other Co")
        cls.client_user = User.objects.create_user("client", password="x", role="CLIENT", company=cls.company)
        cls.colleague = User.objects.create_user("colleague", password="x", role="CLIENT", company=cls.company)
        cls.outsider = User.objects.create_user("outsider", password="x", role="CLIENT", company=cls.other_company)
        cls.admin = User.objects.create_user("admin", password="x", role="ADMIN")
        cls.ops = User.objects.create_user("ops", password="x", role="OPERATIONS_MANAGER")
        cls.finance = User.objects.create_user("finance", password="x", role="FINANCE_MANAGER")
        cls.viewer = User.objects.create_user("viewer", password="x", role="VIEWER")

    def _quote(self, **kwargs):
        return services.create_quote(
            self.client_user,
            Route("FR", "BF", "Paris", "Ouagadougou"),
            kwargs.get("packages", [{"quantity": 2, "weight": Decimal("10"), "cargo_type": "GENERAL"}]),
            kwargs.get("modes", ["ROAD"]),
            kwargs.get("priority", "STANDARD"),
        )

    def _sent(self):
        return services.send_quote(self._quote().pk, self.ops)

    def _in_treatment(self):
        quote = self._sent()
        services.accept_quote(quote.pk, self.client_user, "BANK_TRANSFER")
        return services.start_treatment(quote.pk, self.ops, "Booked on Tuesday's truck")

    # ---- creation ----

    def test_create_prices_and_numbers_quote(self):
        quote = self._quote()
        self.assertEqual(quote.status, QuoteStatus.SUBMITTED)
        self.assertRegex(quote.quote_number, r"^QTE-\d{8}-\d{5}$")
        self.assertEqual(quote.client, self.company)
        # 10 kg x 0.50 x 2 units, road multiplier 1.0
        self.assertEqual(quote.estimated_cost, Decimal("10.00"))
        self.assertEqual(quote.estimate_snapshot["total_price"], "10.00")
        self.assertEqual(quote.package_count, 2)
        log = quote.logs.get()
        self.assertEqual((log.event_type, log.old_status, log.new_status), ("CREATED", None, "SUBMITTED"))

    def test_quote_numbers_are_sequential_per_day(self):
        first, second = self._quote(), self._quote()
        self.assertEqual(int(second.quote_number[-5:]), int(first.quote_number[-5:]) + 1)

    def test_viewer_cannot_create(self):
        with self.assertRaises(TransitionDenied):
            services.create_quote(self.viewer, Route("FR", "BF"), [{"quantity": 1, "weight": "1"}], ["AIR"], "STANDARD")

    # ---- happy path ----

    def test_full_lifecycle_to_validated_creates_one_shipment(self):
        quote = self._in_treatment()
        quote = services.validate_quote(quote.pk, self.ops, 2, "Two cartons of spare parts", "Checked")

        self.assertEqual(quote.status, QuoteStatus.VALIDATED)
        shipment = Shipment.objects.get(quote=quote)
        self.assertRegex(shipment.tracking_number, r"^SHP-\d{8}-\d{5}$")
        self.assertEqual(shipment.package_count, 2)
        self.assertEqual(shipment.status, "APPROVED")
        self.assertEqual(
            _transition_rows(quote),
            [
                ("SUBMITTED", "SENT"),
                ("SENT", "ACCEPTED"),
                ("ACCEPTED", "IN_TREATMENT"),
                ("IN_TREATMENT", "VALIDATED"),
            ],
        )
        self.assertEqual(quote.agent, self.ops)
        self.assertEqual(quote.payment_method, "BANK_TRANSFER")

    def test_send_sets_validity(self):
        quote = self._sent()
        self.assertIsNotNone(quote.sent_at)
        self.assertGreater(quote.valid_until, timezone.now() + datetime.timedelta(days=29))

    # ---- guards ----

    def test_only_operations_may_send(self):
        quote = self._quote()
        for actor in (self.client_user, self.finance, self.viewer):
            with self.assertRaises(TransitionDenied):
                services.send_quote(quote.pk, actor)
        services.send_quote(quote.pk, self.admin)

    def test_only_owning_client_may_accept(self):
        quote = self._sent()
        for actor in (self.outsider, self.ops, self.admin):
            with self.assertRaises(TransitionDenied):
                services.accept_quote(quote.pk, actor, "CASH")
        # a colleague from the same company owns it too
        quote = services.accept_quote(quote.pk, self.colleague, "CASH")
        self.assertEqual(quote.status, QuoteStatus.ACCEPTED)

    def test_accept_requires_known_payment_method(self):
        quote = self._sent()
        with self.assertRaises(InvalidRequest):
            services.accept_quote(quote.pk, self.client_user, "CHEQUE")
        with self.assertRaises(InvalidRequest):
            services.accept_quote(quote.pk, self.client_user, None)
        quote.refresh_from_db()
        self.assertEqual(quote.status, QuoteStatus.SENT)

    def test_accept_after_validity_is_conflict(self):
        quote = self._sent()
        Quote.objects.filter(pk=quote.pk).update(valid_until=timezone.now() - datetime.timedelta(minutes=1))
        with self.assertRaises(StateConflict):
            services.accept_quote(quote.pk, self.client_user, "CASH")

    def test_reject_reason_min_length(self):
        quote = self._sent()
        with self.assertRaises(InvalidRequest):
            services.reject_quote(quote.pk, self.client_user, "too dear")
        quote = services.reject_quote(quote.pk, self.client_user, "Found a cheaper carrier")
        self.assertEqual(quote.status, QuoteStatus.REJECTED)
        self.assertEqual(quote.rejection_reason, "Found a cheaper carrier")

    def test_cancel_from_sent_then_accept_conflicts(self):
        quote = self._sent()
        quote = services.cancel_quote(quote.pk, self.admin, "Client asked us to stop")
        self.assertEqual(quote.status, QuoteStatus.CANCELLED)
        self.assertEqual(_transition_rows(quote)[-1], ("SENT", "CANCELLED"))
        with self.assertRaises(StateConflict) as ctx:
            services.accept_quote(quote.pk, self.client_user, "CASH")
        self.assertEqual(ctx.exception.current_state, "CANCELLED")
        self.assertEqual(ctx.exception.action, "accept")

    def test_cancel_requires_operations_role(self):
        quote = self._quote()
        with self.assertRaises(TransitionDenied):
            services.cancel_quote(quote.pk, self.client_user, "No longer needed at all")

    def test_illegal_transitions_are_conflicts(self):
        quote = self._quote()
        with self.assertRaises(StateConflict):
            services.start_treatment(quote.pk, self.ops)
        with self.assertRaises(StateConflict):
            services.validate_quote(quote.pk, self.ops, 1)
        with self.assertRaises(StateConflict):
            services.accept_quote(quote.pk, self.client_user, "CASH")
        self.assertEqual(quote.logs.count(), 1)

    def test_terminal_states_have_no_exits(self):
        quote = self._in_treatment()
        services.validate_quote(quote.pk, self.ops, 1)
        with self.assertRaises(StateConflict):
            services.cancel_quote(quote.pk, self.ops, "Trying to cancel after validation")
        with self.assertRaises(StateConflict):
            services.send_quote(quote.pk, self.ops)

    # ---- idempotency ----

    def test_repeated_send_is_a_no_op(self):
        quote = self._sent()
        again = services.send_quote(quote.pk, self.ops)
        self.assertEqual(again.status, QuoteStatus.SENT)
        self.assertEqual(quote.logs.count(), 2)

    def test_repeated_accept_with_same_method_is_a_no_op(self):
        quote = self._sent()
        services.accept_quote(quote.pk, self.client_user, "CASH")
        services.accept_quote(quote.pk, self.client_user, "CASH")
        self.assertEqual(quote.logs.filter(new_status="ACCEPTED").count(), 1)
        with self.assertRaises(StateConflict):
            services.accept_quote(quote.pk, self.client_user, "ON_DELIVERY")

    def test_repeated_validate_never_creates_second_shipment(self):
        quote = self._in_treatment()
        services.validate_quote(quote.pk, self.ops, 1)
        with self.assertRaises(StateConflict):
            services.validate_quote(quote.pk, self.ops, 1)
        self.assertEqual(Shipment.objects.filter(quote=quote).count(), 1)

    # ---- atomicity ----

    def test_failed_shipment_creation_leaves_quote_in_treatment(self):
        quote = self._in_treatment()
        logs_before = quote.logs.count()
        with patch("quotes.services.create_shipment_from_quote", side_effect=IntegrityError("boom")):
            with self.assertRaises(IntegrityError):
                services.validate_quote(quote.pk, self.ops, 1)
        quote.refresh_from_db()
        self.assertEqual(quote.status, QuoteStatus.IN_TREATMENT)
        self.assertEqual(quote.logs.count(), logs_before)
        self.assertFalse(Shipment.objects.filter(quote=quote).exists())

    def test_validate_rejects_bad_package_count(self):
        quote = self._in_treatment()
        with self.assertRaises(InvalidRequest):
            services.validate_quote(quote.pk, self.ops, 0)
        for bad in (2.7, Decimal("1.5"), "two", True):
            with self.assertRaises(InvalidRequest):
                services.validate_quote(quote.pk, self.ops, bad)
        quote.refresh_from_db()
        self.assertEqual(quote.status, QuoteStatus.IN_TREATMENT)
        self.assertFalse(Shipment.objects.filter(quote=quote).exists())

    def test_validate_accepts_integral_package_count(self):
        quote = services.validate_quote(self._in_treatment().pk, self.ops, 3.0)
        self.assertEqual(quote.status, QuoteStatus.VALIDATED)
        self.assertEqual(Shipment.objects.get(quote=quote).package_count, 3)

    # ---- expiry ----

    def test_expire_overdue_quotes(self):
        stale, fresh = self._sent(), self._sent()
        Quote.objects.filter(pk=stale.pk).update(valid_until=timezone.now() - datetime.timedelta(days=1))

        self.assertEqual(services.expire_overdue_quotes(), 1)
        stale.refresh_from_db()
        fresh.refresh_from_db()
        self.assertEqual(stale.status, QuoteStatus.EXPIRED)
        self.assertEqual(fresh.status, QuoteStatus.SENT)
        log = stale.logs.order_by("-id").first()
        self.assertEqual((log.event_type, log.changed_by), ("EXPIRED", None))

    def test_expire_command(self):
        quote = self._sent()
        Quote.objects.filter(pk=quote.pk).update(valid_until=timezone.now() - datetime.timedelta(days=1))
        call_command("expire_quotes", stdout=StringIO())
        quote.refresh_from_db()
        self.assertEqual(quote.status, QuoteStatus.EXPIRED)

    def test_ops_cannot_expire_manually(self):
        quote = self._sent()
        with self.assertRaises(TransitionDenied):
            services.expire_quote(quote.pk, self.ops)
        self.assertEqual(services.expire_quote(quote.pk, self.admin).status, QuoteStatus.EXPIRED)

    # ---- payment ----

    def test_start_treatment_keeps_client_payment_method(self):
        quote = self._in_treatment()
        self.assertEqual(quote.payment_method, "BANK_TRANSFER")
        with self.assertRaises(TransitionDenied):
            services.set_payment_method(quote.pk, self.ops, "CASH")

    def test_owner_or_admin_may_change_payment_method(self):
        quote = self._in_treatment()
        services.set_payment_method(quote.pk, self.client_user, "CASH")
        quote = services.set_payment_method(quote.pk, self.admin, "ON_DELIVERY")
        self.assertEqual(quote.payment_method, "ON_DELIVERY")
        events = list(quote.logs.filter(event_type="PAYMENT_METHOD_SET").values_list("metadata", flat=True))
        self.assertEqual([e["payment_method"] for e in events], ["CASH", "ON_DELIVERY"])

    def test_payment_received_once_and_only_when_validated(self):
        quote = self._in_treatment()
        with self.assertRaises(StateConflict):
            services.mark_payment_received(quote.pk, self.finance)
        services.validate_quote(quote.pk, self.ops, 1)

        with self.assertRaises(TransitionDenied):
            services.mark_payment_received(quote.pk, self.client_user)
        quote = services.mark_payment_received(quote.pk, self.finance)
        self.assertTrue(quote.invoice_available)
        self.assertEqual(quote.status, QuoteStatus.VALIDATED)
        with self.assertRaises(StateConflict):
            services.mark_payment_received(quote.pk, self.admin)

    # ---- audit ----

    def test_log_rows_are_immutable(self):
        log = self._quote().logs.get()
        log.notes = "rewritten"
        with self.assertRaises(ValidationError):
            log.save()
        with self.assertRaises(ValidationError):
            log.delete()
        self.assertEqual(QuoteLog.objects.get(pk=log.pk).notes, "")
