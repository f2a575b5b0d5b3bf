"""Schema Base - camelCase wire format shared by every request/response model.

Invariants:
    - Clients send and receive camelCase keys; Python code uses snake_case
    - Both spellings are accepted on input (populate_by_name)
    - UtcDatetime outputs are always timezone-aware UTC
"""

import re
from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from tradeconnect.core.clock import ensure_utc


_URL = re.compile(r"^https?://[^\s/$.?#].[^\s]*$", re.IGNORECASE)


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def to_wire(self, **kwargs) -> dict:
        """JSON-ready dict with camelCase keys."""
        return self.model_dump(by_alias=True, mode="json", **kwargs)


UtcDatetime = Annotated[datetime, AfterValidator(ensure_utc)]


def check_url(value: str | None) -> str | None:
    """Optional http(s) URL; empty strings become None."""
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if not _URL.match(value):
        raise ValueError("Debe ser una URL válida (http:// o https://)")
    return value


def strip_optional(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None
