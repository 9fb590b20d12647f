"""LadderValue: the scalar held in a single ladder cell.

The remote API is loose about cell types. The same column can come back as
``12``, ``12.5`` or ``"12.5"`` depending on the competition, so a cell is
decoded by trying each variant in order (integer, float, text). Anything
else (``null``, booleans, nested objects) collapses to integer zero rather
than failing the whole ladder.

Display formatting is deterministic and depends only on the value and the
column it is shown in.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema

_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1

# Values this close to a whole number are shown without a fractional part.
_INTEGRAL_TOLERANCE = 1e-9
_INTEGRAL_DISPLAY_LIMIT = 1_000_000

ONE_DECIMAL_COLUMNS = frozenset({"oversFaced", "oversBowled"})


class ValueKind(str, Enum):
    INT = "int"
    FLOAT = "float"
    TEXT = "text"


@dataclass(frozen=True, slots=True)
class LadderValue:
    """Tagged union of ``int | float | str``."""

    kind: ValueKind
    value: int | float | str

    @classmethod
    def of_int(cls, value: int) -> LadderValue:
        return cls(ValueKind.INT, int(value))

    @classmethod
    def of_float(cls, value: float) -> LadderValue:
        return cls(ValueKind.FLOAT, float(value))

    @classmethod
    def of_text(cls, value: str) -> LadderValue:
        return cls(ValueKind.TEXT, str(value))

    @classmethod
    def decode(cls, raw: Any) -> LadderValue:
        """Decode a JSON scalar, trying integer, then float, then text.

        Never raises. Booleans are not numbers here, and integers outside the
        signed 64-bit range fall through to float.
        """
        if isinstance(raw, LadderValue):
            return raw
        if isinstance(raw, int) and not isinstance(raw, bool):
            if _I64_MIN <= raw <= _I64_MAX:
                return cls.of_int(raw)
            return cls.of_float(float(raw))
        if isinstance(raw, float):
            return cls.of_float(raw)
        if isinstance(raw, str):
            return cls.of_text(raw)
        return cls.of_int(0)

    def encode(self) -> int | float | str:
        """Return the JSON scalar for the active variant."""
        return self.value

    def display(self, column_id: str | None = None) -> str:
        """Format the value for a ladder table cell.

        Integral floats under a million render as integers. Overs columns get
        one decimal place and every other float gets three.
        """
        if self.kind is ValueKind.INT:
            return str(self.value)
        if self.kind is ValueKind.TEXT:
            return str(self.value)

        v = float(self.value)
        if math.isfinite(v):
            nearest = round(v)
            if abs(v - nearest) < _INTEGRAL_TOLERANCE and abs(v) < _INTEGRAL_DISPLAY_LIMIT:
                return str(int(nearest))
        if column_id is not None and column_id in ONE_DECIMAL_COLUMNS:
            return f"{v:.1f}"
        return f"{v:.3f}"

    def __str__(self) -> str:
        return self.display()

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        """Decode on the way into a model, emit the bare scalar on the way out."""
        return core_schema.no_info_plain_validator_function(
            cls.decode,
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda v: v.encode(),
                when_used="always",
            ),
        )
