"""
Row schemas for employees and shifts.

Raw rows come from CSV files (all strings) or the provider API (native JSON
scalars), so every field is parsed in a `mode="before"` validator that
accepts both. Validators raise PydanticCustomError so the message reported
for a row is exactly the text written here.

validate_employee_row() and validate_shift_row() never raise: a malformed
row comes back as Invalid with one FieldError per failing field, in field
declaration order.
"""
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, Generic, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_core import PydanticCustomError

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s.]+$")

# YYYY-MM-DDTHH:MM[:SS[.fraction]] followed by Z or +HH:MM / -HH:MM
ISO_DATETIME_RE = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2})"
    r"(?::(\d{2})(?:\.(\d{1,9}))?)?"
    r"(Z|[+-]\d{2}:\d{2})$"
)

# Upper bounds that keep derived integers well inside a 64-bit column
MAX_HOURLY_RATE = Decimal("1000000")
MAX_BREAK_MINUTES = 2**31 - 1

T = TypeVar("T")


# ─── Outcomes ─────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


@dataclass(frozen=True)
class Valid(Generic[T]):
    record: T


@dataclass(frozen=True)
class Invalid:
    errors: List[FieldError]

    @property
    def message(self) -> str:
        return "; ".join(str(e) for e in self.errors)


RowOutcome = Union[Valid[T], Invalid]


# ─── Scalar parsers ───────────────────────────────────────────────────────────

def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _required_text(value: Any, error_type: str, message: str) -> str:
    if _is_blank(value) or isinstance(value, (bool, dict, list)):
        raise PydanticCustomError(error_type, message)
    return str(value).strip()


def _optional_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _to_decimal(value: Any) -> Optional[Decimal]:
    """Parse a number from a string or JSON number. None if not numeric."""
    if isinstance(value, bool) or not isinstance(value, (str, int, float, Decimal)):
        return None
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    if not number.is_finite():
        return None
    return number


def parse_iso_datetime(value: str) -> datetime:
    """
    Parse a strict ISO-8601 timestamp with an explicit UTC offset.

    Accepts "2026-01-29T09:00:00Z", "2026-01-29T09:00Z",
    "2026-01-29T09:00:00.250+02:00". Date-only strings, a space instead of
    "T", or a missing offset are rejected.

    Returns:
        Naive datetime in UTC.

    Raises:
        ValueError: if the string is not such a timestamp.
    """
    m = ISO_DATETIME_RE.match(value.strip())
    if not m:
        raise ValueError(f"not an ISO-8601 timestamp: {value!r}")
    year, month, day, hour, minute, second, fraction, offset = m.groups()
    microsecond = int((fraction or "0")[:6].ljust(6, "0"))
    if offset == "Z":
        tz = timezone.utc
    else:
        sign = -1 if offset[0] == "-" else 1
        tz = timezone(sign * timedelta(hours=int(offset[1:3]), minutes=int(offset[4:6])))
    parsed = datetime(
        int(year), int(month), int(day),
        int(hour), int(minute), int(second or 0), microsecond,
        tzinfo=tz,
    )
    return parsed.astimezone(timezone.utc).replace(tzinfo=None)


def _timestamp(value: Any) -> datetime:
    if not isinstance(value, str):
        raise PydanticCustomError("timestamp_invalid", "Invalid ISO-8601 timestamp")
    try:
        return parse_iso_datetime(value)
    except (ValueError, OverflowError):
        raise PydanticCustomError("timestamp_invalid", "Invalid ISO-8601 timestamp")


# ─── Schemas ──────────────────────────────────────────────────────────────────

class EmployeeRow(BaseModel):
    """A validated, normalized employee row."""

    model_config = ConfigDict(extra="ignore", frozen=True, validate_default=True)

    external_id: str = Field(default=None)
    first_name: str = ""
    last_name: str = ""
    email: Optional[str] = None
    hourly_rate_cents: int = Field(default=None, validation_alias="hourly_rate")
    active: bool = Field(default=None)

    @field_validator("external_id", mode="before")
    @classmethod
    def _external_id(cls, value: Any) -> str:
        return _required_text(value, "external_id_required", "External ID is required")

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def _names(cls, value: Any) -> str:
        return _optional_text(value)

    @field_validator("email", mode="before")
    @classmethod
    def _email(cls, value: Any) -> Optional[str]:
        if _is_blank(value):
            return None
        if not isinstance(value, str) or not EMAIL_RE.match(value.strip()):
            raise PydanticCustomError("email_invalid", "Invalid email address")
        return value.strip().lower()

    @field_validator("hourly_rate_cents", mode="before")
    @classmethod
    def _hourly_rate(cls, value: Any) -> int:
        if _is_blank(value):
            raise PydanticCustomError("hourly_rate_required", "Hourly rate is required")
        rate = _to_decimal(value)
        if rate is None:
            raise PydanticCustomError("hourly_rate_invalid", "Hourly rate must be a number")
        if rate < 0:
            raise PydanticCustomError(
                "hourly_rate_negative", "Hourly rate must not be negative"
            )
        if rate > MAX_HOURLY_RATE:
            raise PydanticCustomError("hourly_rate_too_large", "Hourly rate is too large")
        return int((rate * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    @field_validator("active", mode="before")
    @classmethod
    def _active(cls, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in ("true", "false"):
            return value.strip().lower() == "true"
        raise PydanticCustomError("active_invalid", "Active must be true or false")

    def to_fields(self) -> Dict[str, Any]:
        """Mutable Employee columns, keyed as on the model."""
        return self.model_dump(exclude={"external_id"})


class ShiftRow(BaseModel):
    """A validated shift row. Timestamps are naive UTC."""

    model_config = ConfigDict(extra="ignore", frozen=True, validate_default=True)

    external_id: str = Field(default=None)
    employee_external_id: str = Field(default=None)
    start_at: datetime = Field(default=None)
    end_at: datetime = Field(default=None)
    break_minutes: int = 0

    @field_validator("external_id", mode="before")
    @classmethod
    def _external_id(cls, value: Any) -> str:
        return _required_text(value, "external_id_required", "External ID is required")

    @field_validator("employee_external_id", mode="before")
    @classmethod
    def _employee_external_id(cls, value: Any) -> str:
        return _required_text(
            value, "employee_external_id_required", "Employee ID is required"
        )

    @field_validator("start_at", "end_at", mode="before")
    @classmethod
    def _timestamps(cls, value: Any) -> datetime:
        return _timestamp(value)

    @field_validator("break_minutes", mode="before")
    @classmethod
    def _break_minutes(cls, value: Any) -> int:
        minutes = _to_decimal(value)
        if minutes is None:
            # blank or unparseable
            return 0
        if minutes > MAX_BREAK_MINUTES:
            raise PydanticCustomError("break_minutes_too_large", "Break minutes is too large")
        if minutes != minutes.to_integral_value():
            raise PydanticCustomError(
                "break_minutes_fractional", "Break minutes must be a whole number"
            )
        if minutes < 0:
            raise PydanticCustomError(
                "break_minutes_negative", "Break minutes must not be negative"
            )
        return int(minutes)


# ─── Entry points ─────────────────────────────────────────────────────────────

def _validate(schema: Type[BaseModel], raw: Any) -> RowOutcome:
    if not isinstance(raw, Mapping):
        return Invalid([FieldError("row", f"Expected an object, got {type(raw).__name__}")])
    try:
        return Valid(schema.model_validate(dict(raw)))
    except ValidationError as exc:
        return Invalid([
            FieldError(".".join(str(p) for p in err["loc"]) or "row", err["msg"])
            for err in exc.errors()
        ])


def validate_employee_row(raw: Any) -> RowOutcome[EmployeeRow]:
    """Parse a raw employee row into an EmployeeRow or field errors."""
    return _validate(EmployeeRow, raw)


def validate_shift_row(raw: Any) -> RowOutcome[ShiftRow]:
    """
    Parse a raw shift row into a ShiftRow or field errors.

    The end-after-start rule is only checked once both timestamps parse;
    its error is reported against end_at.
    """
    outcome = _validate(ShiftRow, raw)
    if isinstance(outcome, Valid) and outcome.record.end_at <= outcome.record.start_at:
        return Invalid([FieldError("end_at", "End time must be after start time")])
    return outcome
