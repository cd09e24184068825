from __future__ import annotations

import logging
import os
from typing import Any, Optional, Protocol

import requests

from ged_booking.schemas.booking import BookingRequest

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "Erreur lors de la réservation"


class BookingSubmissionError(Exception):
    """
    The submission collaborator refused the booking (validation, no seats left, ...)
    or could not be reached. `message` is shown to the user as-is.
    """

    def __init__(self, message: str, *, status_code: Optional[int] = None, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code


class BookingSubmitter(Protocol):
    def submit(self, request: BookingRequest) -> str:
        """Persist the booking and return its identifier."""
        ...


class HttpBookingSubmitter:
    """
    POSTs the booking as camelCase JSON to the bookings API.

    Responses:
    - 2xx: {"id": "..."}
    - else: {"error": {"code": "...", "message": "..."}}
    """

    def __init__(
        self,
        *,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_url = api_url or os.getenv("GED_BOOKING_API_URL")
        if not self.api_url:
            raise ValueError("GED_BOOKING_API_URL is missing (env var).")

        self.timeout = timeout if timeout is not None else float(os.getenv("GED_BOOKING_TIMEOUT_SECONDS", "15"))
        self.session = session or requests.Session()

    @staticmethod
    def _error_from_body(data: Any) -> tuple[str, Optional[str]]:
        if isinstance(data, dict):
            err = data.get("error")
            if isinstance(err, dict):
                msg = err.get("message")
                code = err.get("code")
                if isinstance(msg, str) and msg.strip():
                    return msg, code if isinstance(code, str) else None
        return DEFAULT_ERROR_MESSAGE, None

    def submit(self, request: BookingRequest) -> str:
        payload = request.to_payload()
        try:
            resp = self.session.post(self.api_url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("booking API unreachable: %s", e)
            raise BookingSubmissionError(str(e) or DEFAULT_ERROR_MESSAGE) from e

        try:
            data = resp.json()
        except ValueError:
            data = None

        if not resp.ok:
            message, code = self._error_from_body(data)
            logger.warning("booking API rejected request: status=%s code=%s", resp.status_code, code)
            raise BookingSubmissionError(message, status_code=resp.status_code, code=code)

        booking_id = data.get("id") if isinstance(data, dict) else None
        if not booking_id:
            raise BookingSubmissionError(DEFAULT_ERROR_MESSAGE, status_code=resp.status_code)
        return str(booking_id)
