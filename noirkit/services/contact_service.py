"""
Contact submission pipeline.

A visitor's submission goes through these stages in order, and the first
failing stage ends the request:

  1. rate limit by client IP            -> 429
  2. Origin/Referer allow-list          -> 403
  3. body structure                     -> 400
  4. replay window on client timestamp  -> 400
  5. sanitize form data
  6. required fields and formats        -> 400
  7. persist                            -> 500
"""

from __future__ import annotations

import logging
import re
import sqlite3
from datetime import UTC, datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from noirkit.config import Settings
from noirkit.db import insert_contact_submission, list_contact_submissions
from noirkit.services.rate_limiter import FixedWindowRateLimiter

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MESSAGE_MIN_LENGTH = 10
MESSAGE_MAX_LENGTH = 1000
REQUIRED_FIELDS = ("name", "email", "message")

SUCCESS_MESSAGE = "Contact form submitted successfully"


class ContactSubmissionError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RateLimitedError(ContactSubmissionError):
    status_code = 429


class OriginRejectedError(ContactSubmissionError):
    status_code = 403


class InvalidSubmissionError(ContactSubmissionError):
    status_code = 400


class SubmissionStorageError(ContactSubmissionError):
    status_code = 500


def _normalize_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    return {k.lower(): v for k, v in headers.items()}


def get_client_ip(headers: Mapping[str, str]) -> str:
    """First X-Forwarded-For entry, then X-Real-IP, then 'unknown'."""
    headers = _normalize_headers(headers)
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = (headers.get("x-real-ip") or "").strip()
    return real_ip or "unknown"


def check_origin(headers: Mapping[str, str], allowed_origins: Sequence[str]) -> None:
    # Absent headers pass; this is not a CSRF token scheme
    headers = _normalize_headers(headers)
    origin = headers.get("origin") or headers.get("referer")
    if origin and not any(allowed in origin for allowed in allowed_origins):
        raise OriginRejectedError("Forbidden origin")


def check_structure(body: Any) -> Tuple[str, Dict[str, Any]]:
    if not isinstance(body, dict):
        raise InvalidSubmissionError("Missing required fields")
    owner_id = body.get("portfolioOwnerId")
    form_data = body.get("formData")
    if not owner_id or not isinstance(owner_id, str) or not isinstance(form_data, dict):
        raise InvalidSubmissionError("Missing required fields")
    return owner_id, form_data


def _parse_timestamp(raw: Any) -> datetime:
    if not isinstance(raw, str) or not raw.strip():
        raise InvalidSubmissionError("Missing timestamp")
    try:
        parsed = datetime.fromisoformat(raw.strip())
    except ValueError:
        raise InvalidSubmissionError("Invalid timestamp")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def check_timestamp(raw: Any, now: datetime, window_seconds: int) -> None:
    """The boundary is closed: a difference of exactly `window_seconds` passes."""
    sent_at = _parse_timestamp(raw)
    if abs((now - sent_at).total_seconds()) > window_seconds:
        raise InvalidSubmissionError("Request expired")


def sanitize_form_data(value: Any) -> Any:
    """Strip '<' and '>' from every string and trim it, recursing into dicts and lists."""
    if isinstance(value, str):
        return value.replace("<", "").replace(">", "").strip()
    if isinstance(value, dict):
        return {k: sanitize_form_data(v) for k, v in value.items()}
    if isinstance(value, list):
        return [sanitize_form_data(v) for v in value]
    return value


def validate_form_fields(form_data: Mapping[str, Any]) -> None:
    for field in REQUIRED_FIELDS:
        value = form_data.get(field)
        if not isinstance(value, str) or not value:
            raise InvalidSubmissionError(f"Missing or invalid field: {field}")

    if not EMAIL_RE.match(form_data["email"]):
        raise InvalidSubmissionError("Invalid email address")

    if not MESSAGE_MIN_LENGTH <= len(form_data["message"]) <= MESSAGE_MAX_LENGTH:
        raise InvalidSubmissionError(
            f"message must be between {MESSAGE_MIN_LENGTH} and {MESSAGE_MAX_LENGTH} characters"
        )


def submit_contact(
    conn: sqlite3.Connection,
    limiter: FixedWindowRateLimiter,
    *,
    headers: Mapping[str, str],
    body: Any,
    settings: Settings,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Run a submission through every stage and persist it.

    Returns the response payload: {message, data, rateLimitRemaining}.
    Raises a ContactSubmissionError subclass carrying the HTTP status of the
    stage that rejected it.
    """
    now = now or datetime.now(UTC)
    client_ip = get_client_ip(headers)

    allowed, remaining = limiter.hit(client_ip)
    if not allowed:
        logger.warning("Rate limit exceeded for %s", client_ip)
        raise RateLimitedError("Too many requests. Please try again later.")

    try:
        check_origin(headers, settings.allowed_origins)
        owner_id, form_data = check_structure(body)
        check_timestamp(body.get("timestamp"), now, settings.replay_window_seconds)
        clean = sanitize_form_data(form_data)
        validate_form_fields(clean)
    except ContactSubmissionError as exc:
        logger.info("Contact submission from %s rejected: %s", client_ip, exc.message)
        raise

    # The userAgent the client reports in the body wins over the User-Agent header
    user_agent = (
        (body.get("userAgent") if isinstance(body.get("userAgent"), str) else None)
        or _normalize_headers(headers).get("user-agent")
        or "unknown"
    )

    try:
        record = insert_contact_submission(
            conn,
            portfolio_owner_id=owner_id,
            form_data=clean,
            ip_address=client_ip,
            user_agent=user_agent,
            submitted_at=now.isoformat(),
        )
    except sqlite3.Error as exc:
        conn.rollback()
        logger.error("Error inserting contact submission: %s", exc)
        raise SubmissionStorageError("Failed to submit contact form") from exc

    logger.info("Contact submission %s stored for owner %s", record["id"], owner_id)
    return {"message": SUCCESS_MESSAGE, "data": record, "rateLimitRemaining": remaining}


def list_submissions(conn: sqlite3.Connection, owner_id: str) -> List[Dict[str, Any]]:
    try:
        return list_contact_submissions(conn, owner_id)
    except sqlite3.Error as exc:
        logger.error("Error fetching contact submissions: %s", exc)
        raise SubmissionStorageError("Failed to fetch contact submissions") from exc
