from __future__ import annotations

import logging
from typing import Dict, List, Optional, Union

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import exceptions as drf_exceptions
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)

FieldErrors = Dict[str, Union[str, List[str]]]


class FreightDeskError(Exception):
    """Base exception for domain errors surfaced through the API"""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Request could not be processed."

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

    def as_payload(self) -> dict:
        return {"detail": self.detail}


class InvalidRequest(FreightDeskError):
    """Malformed or missing input, with per-field messages"""

    default_detail = "Invalid request."

    def __init__(self, errors: Optional[FieldErrors] = None, detail: Optional[str] = None):
        self.errors = dict(errors or {})
        if detail is None and len(self.errors) == 1:
            (field, message), = self.errors.items()
            if isinstance(message, list):
                message = "; ".join(message)
            detail = f"{field}: {message}"
        super().__init__(detail)

    def as_payload(self) -> dict:
        payload = super().as_payload()
        if self.errors:
            payload["errors"] = self.errors
        return payload


class TransitionDenied(FreightDeskError):
    """Actor lacks the role or ownership an action requires"""

    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You are not allowed to perform this action."


class StateConflict(FreightDeskError):
    """Action is not legal from the entity's current state"""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, current_state: Optional[str], action: str, detail: Optional[str] = None):
        self.current_state = current_state
        self.action = action
        super().__init__(detail or f"Cannot {action} from state {current_state}.")

    def as_payload(self) -> dict:
        payload = super().as_payload()
        payload.update({"current_state": self.current_state, "action": self.action})
        return payload


class TokenExpired(FreightDeskError):
    """A guest tracking link or invitation is past its expiry"""

    status_code = status.HTTP_410_GONE
    default_detail = "This link has expired."


class PricingConfigMissing(FreightDeskError):
    """No pricing configuration has been set up"""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Pricing configuration is not available."


def require_min_length(field: str, value: Optional[str], minimum: int = 10) -> str:
    text = (value or "").strip()
    if len(text) < minimum:
        raise InvalidRequest({field: f"Must be at least {minimum} characters."})
    return text


def api_exception_handler(exc, context):
    """
    DRF exception handler giving every error the {'detail': ...} shape.

    Domain errors map to their own status codes. Anything DRF does not know
    about is logged and answered with a generic 500.
    """
    if isinstance(exc, FreightDeskError):
        if isinstance(exc, PricingConfigMissing):
            logger.error(f"Pricing configuration missing: {exc.detail}")
        return Response(exc.as_payload(), status=exc.status_code)

    if isinstance(exc, DjangoValidationError):
        return Response({"detail": "; ".join(exc.messages)}, status=status.HTTP_400_BAD_REQUEST)

    response = drf_exception_handler(exc, context)
    if response is not None:
        if isinstance(exc, drf_exceptions.ValidationError):
            errors = response.data if isinstance(response.data, dict) else {"non_field_errors": response.data}
            response.data = {"detail": "Invalid request.", "errors": errors}
        return response

    view = context.get("view")
    logger.exception(f"Unhandled error in {view.__class__.__name__ if view else 'unknown view'}")
    return Response({"detail": "Internal server error."}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
