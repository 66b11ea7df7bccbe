"""Built-in rule predicates.

Every predicate takes the value under test followed by the rule's params,
returns ``None`` when the value is acceptable, and raises `RuleViolation`
with a user-facing message otherwise. Multi-field predicates take the list
of non-``None`` values of their target fields.

`BUILTIN_RULES` maps rule names to ``(predicate, multi)`` and is loaded into
every new `RuleRegistry`.
"""

import re
from collections.abc import Callable, Collection, Sequence, Sized
from datetime import date
from typing import Any

from recordkit.errors import InvalidRuleError, RequiredFieldError, RuleViolation
from recordkit.validation.types import check_type, is_numeric

NON_DIGIT = re.compile(r"[^0-9]")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@.\s]+\.[^@\s]+$")
EMAIL_FORBIDDEN = re.compile(r"[@.][@.]")
PHONE_PREFIX = re.compile(r"^\+[0-9]+ *")
PHONE_AREA_CODE = re.compile(r"^\(([0-9]+(?: [0-9]+)*)\)")
PHONE_INVALID = re.compile(r"[^\- 0-9/.]")
PHONE_MISPLACED = re.compile(r"[+()]")
PROSE_INVALID = re.compile(r"[^-\w '\"/!?@#$%&():;.,]|_")
DATE_PATTERN = re.compile(r"^([0-9]{4})-([0-9]{2})-([0-9]{2})$")
TIME_PATTERN = re.compile(r"^([0-9]{2}):([0-9]{2}):([0-9]{2})$")
DATETIME_PATTERN = re.compile(r"^([0-9]{4}-[0-9]{2}-[0-9]{2}) ([0-9]{2}:[0-9]{2}:[0-9]{2})$")
IPV4_PATTERN = re.compile(r"^[0-9]+(?:\.[0-9]+){3}$")
MASK_PATTERN = re.compile(r"^[0-9]{1,2}$")
MAX_PHONE_DIGITS = 15

Predicate = Callable[..., None]


def required(value: Any) -> None:
    """Fail only on ``None``. An empty string counts as present."""
    if value is None:
        raise RequiredFieldError()


def length(value: Any, min: int = 0, max: int | None = None) -> None:  # pylint: disable=redefined-builtin
    size = len(value) if isinstance(value, Sized) else len(str(value))
    if size < min:
        raise RuleViolation(f"Shorter than minimum allowed length of {min}")
    if max is not None and size > max:
        raise RuleViolation(f"Longer than maximum allowed length of {max}")


def email(value: Any) -> None:
    text = str(value)
    if not EMAIL_PATTERN.match(text) or EMAIL_FORBIDDEN.search(text):
        raise RuleViolation("Invalid email address")


def password(value: Any) -> None:
    text = str(value)
    problems = []
    if len(text) < 8:
        problems.append("must be at least 8 characters long")
    if not re.search(r"[a-z]", text):
        problems.append("must contain a lowercase letter")
    if not re.search(r"[A-Z]", text):
        problems.append("must contain an uppercase letter")
    if not re.search(r"[0-9]", text):
        problems.append("must contain a number")
    if problems:
        message = ", ".join(problems)
        raise RuleViolation(message[0].upper() + message[1:])


def phone(value: Any, min_digits: int = 8) -> None:
    """Check a phone number written with common separators.

    An international ``+NN`` prefix and a parenthesised area code are allowed.
    ``min_digits`` may be lowered for short numbers such as ``000``.
    """
    min_digits = int(min_digits)
    if min_digits <= 0:
        min_digits = 8
    text = str(value)
    clean = PHONE_PREFIX.sub("", text, count=1)
    clean = PHONE_AREA_CODE.sub(r"\1", clean, count=1)
    if PHONE_INVALID.search(clean):
        if PHONE_MISPLACED.search(clean):
            raise RuleViolation("Invalid format")
        raise RuleViolation("Contains invalid characters")

    digits = len(NON_DIGIT.sub("", text))
    if digits < min_digits:
        raise RuleViolation(f"Must contain at least {min_digits} digits")
    if digits > MAX_PHONE_DIGITS:
        raise RuleViolation(f"Cannot contain more than {MAX_PHONE_DIGITS} digits")


def positive_int(value: Any) -> None:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value)
    if isinstance(value, bool) or not text or NON_DIGIT.search(text):
        raise RuleViolation("Value must be a whole number that is greater than zero")
    if int(text) <= 0:
        raise RuleViolation("Value must be greater than zero")


def prose_text(value: Any) -> None:
    if PROSE_INVALID.search(str(value)):
        raise RuleViolation("Non prose characters found")


def _check_bounds(part: str, low: int, high: int, message: str) -> None:
    if not low <= int(part) <= high:
        raise RuleViolation(message)


def date_mysql(value: Any) -> None:
    """Check a ``YYYY-MM-DD`` date with loose field ranges."""
    if not (match := DATE_PATTERN.match(str(value))):
        raise RuleViolation("Invalid date format")
    year, month, day = match.groups()
    _check_bounds(year, 1900, 2100, "Year is outside of range of 1900 to 2100")
    _check_bounds(month, 1, 12, "Month is outside of range of 1 to 12")
    _check_bounds(day, 1, 31, "Day is outside of range of 1 to 31")


def time_mysql(value: Any) -> None:
    """Check a ``HH:MM:SS`` time."""
    if not (match := TIME_PATTERN.match(str(value))):
        raise RuleViolation("Invalid time format")
    hour, minute, second = match.groups()
    _check_bounds(hour, 0, 23, "Hour is outside of range of 0 to 23")
    _check_bounds(minute, 0, 59, "Minute is outside of range of 0 to 59")
    _check_bounds(second, 0, 59, "Second is outside of range of 0 to 59")


def datetime_mysql(value: Any) -> None:
    if not (match := DATETIME_PATTERN.match(str(value))):
        raise RuleViolation("Invalid datetime format")
    date_mysql(match.group(1))
    time_mysql(match.group(2))


def in_array(value: Any, allowed: Collection[Any]) -> None:
    if value not in allowed:
        raise RuleViolation("Invalid value")


def all_in_array(value: Sequence[Any], allowed: Collection[Any]) -> None:
    if any(item not in allowed for item in value):
        raise RuleViolation("Invalid value")


def numeric(value: Any) -> None:
    if not is_numeric(value):
        raise RuleViolation("Value must be a number")


def binary(value: Any) -> None:
    if isinstance(value, bool) or value not in ("1", 1, "0", 0):
        raise RuleViolation('Value must be a "1" or "0"')


def range_(value: Any, min: float, max: float) -> None:  # pylint: disable=redefined-builtin
    """Inclusive numeric range; numeric strings are compared as numbers."""
    numeric(value)
    if not float(min) <= float(value) <= float(max):
        raise RuleViolation(f"Value must be no less than {min} and no greater than {max}")


def regex(value: Any, pattern: str) -> None:
    if not re.search(pattern, str(value)):
        raise RuleViolation("Incorrect format")


def ipv4_addr(value: Any) -> None:
    text = str(value)
    if not IPV4_PATTERN.match(text) or any(int(part) > 255 for part in text.split(".")):
        raise RuleViolation("Invalid IP address")


def ipv4_cidr(value: Any) -> None:
    text = str(value)
    if "/" not in text:
        raise RuleViolation("Invalid CIDR block")
    address, mask = text.split("/", 1)
    ipv4_addr(address)
    if not MASK_PATTERN.match(mask) or int(mask) > 32:
        raise RuleViolation("Invalid network mask")


def ipv4_addr_or_cidr(value: Any) -> None:
    if "/" in str(value):
        ipv4_cidr(value)
    else:
        ipv4_addr(value)


def _to_date(text: str) -> date:
    date_mysql(text)
    try:
        return date.fromisoformat(text)
    except ValueError as e:
        raise RuleViolation("Invalid date") from e


# ----------------------------------------------------------------------
# Multi-field rules
# ----------------------------------------------------------------------


def one_required(values: Sequence[Any]) -> None:
    for value in values:
        if isinstance(value, Sized):
            if len(value) > 0:
                return
        else:
            return
    raise RuleViolation("At least one of these must be provided")


def all_match(values: Sequence[Any]) -> None:
    if any(value != values[0] for value in values[1:]):
        raise RuleViolation("Provided values do not match")


def all_unique(values: Sequence[Any]) -> None:
    for i, value in enumerate(values):
        if value in values[i + 1 :]:
            raise RuleViolation("Provided values must not be the same")


def date_range(
    values: Sequence[Any],
    min: str | None = None,  # pylint: disable=redefined-builtin
    max: str | None = None,  # pylint: disable=redefined-builtin
    enforce_ordering: bool = True,
) -> None:
    """Check a ``[start, end]`` pair of ``YYYY-MM-DD`` dates.

    A pair with a missing side is not checked.

    Raises:
        InvalidRuleError: If the rule targets more than two fields.
    """
    if len(values) > 2:
        raise InvalidRuleError("A date range must target exactly two fields: a start and an end")
    if len(values) < 2:
        return
    start, end = (str(value) for value in values)
    if enforce_ordering and _to_date(start) > _to_date(end):
        raise RuleViolation(f"The start date, {start}, cannot be later than the end date {end}")
    if min and _to_date(start) < _to_date(min):
        raise RuleViolation(f"The start of this date range is outside the minimum of {min}")
    if max and _to_date(end) > _to_date(max):
        raise RuleViolation(f"The end of this date range is outside the maximum of {max}")


BUILTIN_RULES: dict[str, tuple[Predicate, bool]] = {
    "required": (required, False),
    "length": (length, False),
    "email": (email, False),
    "password": (password, False),
    "phone": (phone, False),
    "positiveInt": (positive_int, False),
    "proseText": (prose_text, False),
    "dateMySQL": (date_mysql, False),
    "timeMySQL": (time_mysql, False),
    "datetimeMySQL": (datetime_mysql, False),
    "inArray": (in_array, False),
    "allInArray": (all_in_array, False),
    "numeric": (numeric, False),
    "binary": (binary, False),
    "range": (range_, False),
    "regex": (regex, False),
    "ipv4Addr": (ipv4_addr, False),
    "ipv4Cidr": (ipv4_cidr, False),
    "ipv4AddrOrCidr": (ipv4_addr_or_cidr, False),
    "type": (check_type, False),
    "oneRequired": (one_required, True),
    "allMatch": (all_match, True),
    "allUnique": (all_unique, True),
    "dateRange": (date_range, True),
}
