"""Response Envelope - the success shape every endpoint returns.

Invariants:
    - {success: true, message, data?, timestamp}; data omitted when None
    - Error envelopes come from TradeConnectError.to_response() instead
"""

from typing import Any

from tradeconnect.core.errors import utc_timestamp


def success(message: str, data: Any = None) -> dict:
    body: dict[str, Any] = {"success": True, "message": message}
    if data is not None:
        body["data"] = data
    body["timestamp"] = utc_timestamp()
    return body
