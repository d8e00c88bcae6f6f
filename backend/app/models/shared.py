"""Column types and helpers shared by the ledger and settlement models."""

import uuid
from typing import Any

from sqlalchemy import BigInteger, String, TypeDecorator
from sqlalchemy.engine import Dialect


class UUIDType(TypeDecorator[uuid.UUID]):
    """UUID stored as its canonical 36-character string.

    Works the same on SQLite (tests) and PostgreSQL, so conditional updates
    and unique indexes behave identically in both.
    """

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value: Any, dialect: Dialect) -> str | None:
        if value is None:
            return None
        return str(value if isinstance(value, uuid.UUID) else uuid.UUID(str(value)))

    def process_result_value(self, value: Any, dialect: Dialect) -> uuid.UUID | None:
        if value is None or isinstance(value, uuid.UUID):
            return value
        return uuid.UUID(value)


# All money columns hold integer minor units (paise, cents).
MinorUnits = BigInteger


def generate_uuid() -> uuid.UUID:
    return uuid.uuid4()
