# storefront/services/razorpay.py
from __future__ import annotations

import base64
import hashlib
import hmac
import json
import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from django.conf import settings

from orders.services.exceptions import GatewayError

logger = logging.getLogger(__name__)

RAZORPAY_BASE = "https://api.razorpay.com/v1"


def _razorpay_cfg() -> dict:
    payments = getattr(settings, "PAYMENTS", {}) or {}
    cfg = (payments.get("RAZORPAY") or {}) if isinstance(payments, dict) else {}
    return cfg if isinstance(cfg, dict) else {}


def get_key_id() -> str:
    return (_razorpay_cfg().get("KEY_ID") or "").strip()


def _get_key_secret() -> str:
    secret = (_razorpay_cfg().get("KEY_SECRET") or "").strip()
    if not secret:
        logger.error(
            "RAZORPAY KEY_SECRET is not configured. "
            "Expected settings.PAYMENTS['RAZORPAY']['KEY_SECRET']."
        )
        raise GatewayError("Payment gateway is not configured.")
    return secret


def _api_base() -> str:
    return (_razorpay_cfg().get("API_BASE") or RAZORPAY_BASE).rstrip("/")


def _timeout() -> int:
    return int(_razorpay_cfg().get("TIMEOUT") or 25)


def to_subunits(amount) -> int:
    """
    Major currency units -> integer subunits (rupees -> paise), half-up.
    """
    try:
        major = Decimal(str(amount))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise ValueError("amount must be a valid Decimal") from exc
    subunits = (major * Decimal("100")).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(subunits)


def _safe_preview(text: str, limit: int = 800) -> str:
    text = (text or "").strip()
    if len(text) <= limit:
        return text
    return text[:limit] + " ...(truncated)"


def _parse_json(raw: str) -> dict[str, Any] | None:
    try:
        parsed = json.loads(raw or "")
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None


def _request_json(method: str, path: str, *, body: dict | None = None) -> dict[str, Any]:
    key_id = get_key_id()
    token = base64.b64encode(f"{key_id}:{_get_key_secret()}".encode("utf-8")).decode("ascii")

    data = None
    if body is not None:
        data = json.dumps(body, ensure_ascii=False).encode("utf-8")

    req = Request(
        f"{_api_base()}{path}",
        data=data,
        headers={
            "Authorization": f"Basic {token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        },
        method=method,
    )

    try:
        with urlopen(req, timeout=_timeout()) as resp:
            raw = resp.read().decode("utf-8", errors="replace")
    except HTTPError as e:
        raw = e.read().decode("utf-8", errors="replace") if e.fp else ""
        parsed = _parse_json(raw) or {}
        err = parsed.get("error") if isinstance(parsed.get("error"), dict) else {}
        msg = err.get("description") or _safe_preview(raw) or str(e)
        logger.warning(
            "Razorpay rejected request",
            extra={"path": path, "http_status": e.code, "gateway_message": msg},
        )
        raise GatewayError(f"Payment gateway rejected the request ({e.code}).") from e
    except (URLError, TimeoutError, OSError) as e:
        logger.warning("Razorpay unreachable", extra={"path": path, "reason": str(e)})
        raise GatewayError("Payment gateway is unreachable. Please retry.") from e

    parsed = _parse_json(raw)
    if parsed is None:
        logger.warning(
            "Razorpay returned non-JSON",
            extra={"path": path, "preview": _safe_preview(raw, limit=200)},
        )
        raise GatewayError("Payment gateway returned an unexpected response.")

    return parsed


def create_gateway_order(*, amount_subunits: int, currency: str, receipt: str) -> dict:
    """
    POST /orders -> {"id", "amount", "currency", ...}
    """
    payload = {
        "amount": int(amount_subunits),
        "currency": str(currency).strip().upper(),
        "receipt": str(receipt).strip(),
    }

    parsed = _request_json("POST", "/orders", body=payload)

    gateway_order_id = str(parsed.get("id") or "").strip()
    if not gateway_order_id:
        raise GatewayError("Payment gateway did not return an order id.")

    logger.info(
        "Razorpay order created",
        extra={"gateway_order_id": gateway_order_id, "receipt": payload["receipt"]},
    )
    try:
        amount = int(parsed.get("amount") or payload["amount"])
    except (TypeError, ValueError) as exc:
        raise GatewayError("Payment gateway returned an invalid amount.") from exc

    return {
        "id": gateway_order_id,
        "amount": amount,
        "currency": str(parsed.get("currency") or payload["currency"]),
    }


def generate_signature(*, gateway_order_id: str, gateway_payment_id: str, secret: str | None = None) -> str:
    key = (secret if secret is not None else _get_key_secret()).encode("utf-8")
    message = f"{gateway_order_id}|{gateway_payment_id}".encode("utf-8")
    return hmac.new(key, message, hashlib.sha256).hexdigest()


def verify_payment_signature(*, gateway_order_id: str, gateway_payment_id: str, signature: str | None) -> bool:
    if not signature:
        return False
    expected = generate_signature(
        gateway_order_id=str(gateway_order_id or ""),
        gateway_payment_id=str(gateway_payment_id or ""),
    )
    return hmac.compare_digest(expected.encode("utf-8"), str(signature).strip().encode("utf-8"))
