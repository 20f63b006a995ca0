import datetime

import pytest
from django.core.exceptions import ValidationError
from rest_framework import serializers

from quotes.models import Quote, QuoteLog

from ..exceptions import (
    InvalidRequest,
    PricingConfigMissing,
    StateConflict,
    TokenExpired,
    TransitionDenied,
    api_exception_handler,
)
from ..models import DailySequence
from ..sequences import format_reference, next_reference
from ..workflow import StateMachine, Transition, non_terminal


class TestSequences:
    pytestmark = pytest.mark.django_db

    def test_references_count_up_per_prefix_and_day(self):
        day = datetime.date(2026, 3, 9)
        assert next_reference("QTE", day) == "QTE-20260309-00001"
        assert next_reference("QTE", day) == "QTE-20260309-00002"
        assert next_reference("SHP", day) == "SHP-20260309-00001"
        assert next_reference("QTE", day + datetime.timedelta(days=1)) == "QTE-20260310-00001"
        assert DailySequence.objects.get(prefix="QTE", day=day).last_value == 2

    def test_format_pads_to_five_digits(self):
        assert format_reference("PK", datetime.date(2026, 1, 2), 42) == "PK-20260102-00042"
        assert format_reference("PR", datetime.date(2026, 1, 2), 123456) == "PR-20260102-123456"


DOOR = StateMachine(
    name="door",
    transitions=[
        Transition("open", frozenset({"CLOSED"}), "OPEN"),
        Transition("close", frozenset({"OPEN"}), "CLOSED"),
        Transition("weld", frozenset({"CLOSED"}), "WELDED", replayable=False),
        Transition("remove", non_terminal({"OPEN", "CLOSED", "WELDED", "GONE"}, {"WELDED", "GONE"}), "GONE"),
    ],
    terminal=frozenset({"WELDED", "GONE"}),
)


class TestStateMachine:
    def test_legal_transition(self):
        assert DOOR.resolve("CLOSED", "open").target == "OPEN"
        assert DOOR.allowed_actions("CLOSED") == ["open", "weld", "remove"]

    def test_replay_is_a_no_op(self):
        assert DOOR.resolve("OPEN", "open") is None
        assert DOOR.resolve("GONE", "remove") is None

    def test_non_replayable_action_conflicts(self):
        with pytest.raises(StateConflict) as exc:
            DOOR.resolve("WELDED", "weld")
        assert exc.value.current_state == "WELDED"
        assert exc.value.action == "weld"

    def test_terminal_and_unknown(self):
        assert DOOR.is_terminal("GONE")
        with pytest.raises(StateConflict):
            DOOR.resolve("GONE", "open")
        with pytest.raises(StateConflict):
            DOOR.resolve("OPEN", "paint")
        with pytest.raises(StateConflict):
            DOOR.resolve("OPEN", "weld")

    def test_table_cannot_leave_terminal_states(self):
        with pytest.raises(ValueError):
            StateMachine("bad", [Transition("reopen", frozenset({"DONE"}), "OPEN")], terminal=frozenset({"DONE"}))


class TestExceptionHandler:
    def _handle(self, exc):
        return api_exception_handler(exc, {"view": None})

    def test_domain_errors_map_to_status_codes(self):
        cases = [
            (InvalidRequest({"weight": "Must be greater than 0."}), 400),
            (TransitionDenied(), 403),
            (StateConflict("SENT", "validate"), 409),
            (TokenExpired(), 410),
            (PricingConfigMissing(), 503),
        ]
        for exc, code in cases:
            response = self._handle(exc)
            assert response.status_code == code
            assert "detail" in response.data

    def test_payload_details(self):
        data = self._handle(InvalidRequest({"weight": "Must be greater than 0."})).data
        assert data == {"detail": "weight: Must be greater than 0.", "errors": {"weight": "Must be greater than 0."}}

        data = self._handle(StateConflict("SENT", "validate")).data
        assert data["current_state"] == "SENT"
        assert data["action"] == "validate"

    def test_drf_validation_errors_are_wrapped(self):
        response = self._handle(serializers.ValidationError({"reason": ["Too short."]}))
        assert response.status_code == 400
        assert response.data["detail"] == "Invalid request."
        assert response.data["errors"] == {"reason": ["Too short."]}

    def test_unexpected_errors_hide_details(self):
        response = self._handle(RuntimeError("database password is hunter2"))
        assert response.status_code == 500
        assert response.data == {"detail": "Internal server error."}


@pytest.mark.django_db
def test_status_log_rows_are_immutable():
    quote = Quote.objects.create(
        quote_number="QTE-20260309-00001",
        origin_country="FR",
        destination_country="BF",
        total_weight=1,
        package_count=1,
        estimated_cost=10,
        currency="EUR",
    )
    log = QuoteLog.objects.create(quote=quote, event_type="CREATED", new_status="SUBMITTED")
    log.notes = "edited"
    with pytest.raises(ValidationError):
        log.save()
    with pytest.raises(ValidationError):
        log.delete()
    assert QuoteLog.objects.get(pk=log.pk).notes == ""
