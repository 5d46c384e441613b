"""
JavaScript Value Model
======================

Literal nodes carry plain Python values. The mapping is:

    undefined  -> UNDEFINED (module singleton, falsy)
    null       -> None
    boolean    -> bool
    number     -> int or float (NaN and Infinity are floats)
    string     -> str

The helpers below reproduce the pieces of the ECMAScript abstract operations
the folding rules rely on: ToBoolean, ToNumber, ToString and the `+`
operator on primitives.
"""

import math
from typing import Any, Union


class _Undefined:
    """The JavaScript `undefined` value."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return 'undefined'

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __reduce__(self):
        return (_Undefined, ())


UNDEFINED = _Undefined()

Number = Union[int, float]

# 2**53; larger integers are not all representable as JS numbers
INTEGER_LIMIT = 9007199254740992


def is_literal_value(value: Any) -> bool:
    """Check whether *value* can be carried by a Literal node."""
    return value is UNDEFINED or value is None or isinstance(value, (bool, int, float, str))


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def js_truthy(value: Any) -> bool:
    """ToBoolean."""
    if value is UNDEFINED or value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return not (value == 0 or math.isnan(value))
    if isinstance(value, str):
        return len(value) > 0
    return True


def js_to_number(value: Any) -> Number:
    """ToNumber for primitive values."""
    if isinstance(value, bool):
        return 1 if value else 0
    if value is None:
        return 0
    if value is UNDEFINED:
        return math.nan
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        if '_' in text:
            return math.nan
        lowered = text.lower()
        try:
            if lowered.startswith(('0x', '0o', '0b')):
                return int(text, 0)
        except ValueError:
            return math.nan
        if text in ('Infinity', '+Infinity'):
            return math.inf
        if text == '-Infinity':
            return -math.inf
        if lowered in ('inf', '+inf', '-inf', 'nan', 'infinity', '+infinity', '-infinity'):
            return math.nan
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return float(text)
        except ValueError:
            return math.nan
    return math.nan


def format_number(value: Number) -> str:
    """Number::toString(10).

    The shortest round-trip digits come from ``repr``; the layout follows
    ECMA-262: plain decimals while the decimal exponent lies in (-6, 21],
    exponent notation otherwise.
    """
    if isinstance(value, int):
        if abs(value) <= INTEGER_LIMIT:
            return str(value)
        value = float(value)
    if math.isnan(value):
        return 'NaN'
    if math.isinf(value):
        return 'Infinity' if value > 0 else '-Infinity'
    if value == 0:
        return '0'
    sign = '-' if value < 0 else ''
    text = repr(abs(value))
    exponent = 0
    if 'e' in text:
        text, tail = text.split('e')
        exponent = int(tail)
    whole = text.split('.')[0]
    raw = text.replace('.', '')
    digits = raw.lstrip('0')
    # position of the decimal point relative to the first significant digit
    point = len(whole) + exponent - (len(raw) - len(digits))
    digits = digits.rstrip('0')
    k = len(digits)
    if k <= point <= 21:
        return sign + digits + '0' * (point - k)
    if 0 < point <= 21:
        return sign + digits[:point] + '.' + digits[point:]
    if -6 < point <= 0:
        return sign + '0.' + '0' * -point + digits
    e = point - 1
    mantissa = digits if k == 1 else digits[0] + '.' + digits[1:]
    return f"{sign}{mantissa}e{'+' if e >= 0 else '-'}{abs(e)}"


def js_to_string(value: Any) -> str:
    """ToString for primitive values."""
    if value is UNDEFINED:
        return 'undefined'
    if value is None:
        return 'null'
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, str):
        return value
    return format_number(value)


def js_add(left: Any, right: Any) -> Any:
    """The `+` operator applied to two primitives.

    String concatenation wins as soon as either operand is a string;
    otherwise both sides go through ToNumber.
    """
    if isinstance(left, str) or isinstance(right, str):
        return js_to_string(left) + js_to_string(right)
    a = js_to_number(left)
    b = js_to_number(right)
    if isinstance(a, int) and isinstance(b, int):
        total = a + b
        if abs(total) <= INTEGER_LIMIT:
            return total
    return float(a) + float(b)


def as_array_index(value: Any):
    """Return *value* as an integer index, or None when it is not an
    integral number or a canonical numeric string (`'1'`, not `'01'`).
    Negative results are out of range for every array."""
    if isinstance(value, str):
        if value.isdigit() and value.isascii() and str(int(value)) == value:
            return int(value)
        return None
    if not is_number(value):
        return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    return value
