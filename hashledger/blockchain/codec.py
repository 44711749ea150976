"""
Record Codec Module

Canonical encoding of block payloads:
- Amount canonicalization ("0025" -> "25", "01.50" -> "1.5")
- Boundary validation of sender, receiver and amount
- Deterministic serialization used as hash input

The canonical form is what gets hashed and stored, so two numerically equal
amounts always produce the same block hash.
"""

import json
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Union

from ..exceptions import InvalidPayload


# ============================================================================
# Constants
# ============================================================================

# Plain decimal notation only: no sign, no exponent
_DECIMAL_RE = re.compile(r'(?P<int>[0-9]*)(?:\.(?P<frac>[0-9]*))?')

FIELD_ORDER = ('sender', 'receiver', 'amount')

AmountInput = Union[str, int, Decimal]


# ============================================================================
# Amount Canonicalization
# ============================================================================

def _canonical_text(text: str) -> str:
    match = _DECIMAL_RE.fullmatch(text)
    if not match:
        raise InvalidPayload(f"Amount is not a decimal number: {text!r}")

    int_part = match.group('int')
    frac_part = match.group('frac') or ''
    if not int_part and not frac_part:
        raise InvalidPayload(f"Amount is not a decimal number: {text!r}")

    int_part = int_part.lstrip('0') or '0'
    frac_part = frac_part.rstrip('0')

    if int_part == '0' and not frac_part:
        raise InvalidPayload(f"Amount must be greater than zero: {text!r}")

    return f"{int_part}.{frac_part}" if frac_part else int_part


def canonical_amount(value: AmountInput) -> str:
    """
    Normalize an amount to its canonical decimal string.

    Leading zeros in the integer part and trailing zeros in the fractional
    part are removed. The conversion is textual and exact.

    Args:
        value: Amount as text, int or Decimal

    Returns:
        Canonical decimal text, e.g. "25" or "1.5"

    Raises:
        InvalidPayload: If the amount is not a finite, strictly positive
            decimal in plain notation
    """
    # bool is an int subclass; floats carry binary rounding noise
    if isinstance(value, (bool, float)):
        raise InvalidPayload(f"Unsupported amount type: {type(value).__name__}")

    if isinstance(value, Decimal):
        if not value.is_finite():
            raise InvalidPayload(f"Amount must be finite: {value}")
        text = format(value, 'f')
    elif isinstance(value, int):
        text = str(value)
    elif isinstance(value, str):
        text = value.strip()
    else:
        raise InvalidPayload(f"Unsupported amount type: {type(value).__name__}")

    return _canonical_text(text)


# ============================================================================
# Payload
# ============================================================================

@dataclass(frozen=True)
class Payload:
    """
    User-supplied block content.

    Build instances with make_payload(); the constructor itself does not
    validate so that the fixed genesis payload can be expressed.
    """
    sender: str
    receiver: str
    amount: str  # Canonical decimal text

    @property
    def value(self) -> Decimal:
        """Amount as an exact Decimal."""
        return Decimal(self.amount)

    def to_dict(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in FIELD_ORDER}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Payload':
        for name in FIELD_ORDER:
            if not isinstance(data[name], str):
                raise TypeError(f"Payload {name} must be a string, got {data[name]!r}")
        return cls(
            sender=data['sender'],
            receiver=data['receiver'],
            amount=data['amount'],
        )

    def __str__(self) -> str:
        return f"{self.sender} -> {self.receiver}: {self.amount}"


def make_payload(sender: str, receiver: str, amount: AmountInput) -> Payload:
    """
    Validate raw fields and build a Payload eligible for appending.

    Args:
        sender: Sending party, must be non-empty after stripping
        receiver: Receiving party, must be non-empty after stripping
        amount: Amount in any form accepted by canonical_amount()

    Returns:
        Payload with a canonical amount

    Raises:
        InvalidPayload: On empty parties or an invalid amount
    """
    sender = (sender or '').strip()
    receiver = (receiver or '').strip()

    if not sender:
        raise InvalidPayload("Sender cannot be empty")
    if not receiver:
        raise InvalidPayload("Receiver cannot be empty")

    return Payload(sender=sender, receiver=receiver, amount=canonical_amount(amount))


def check_payload(payload: Payload) -> None:
    """
    Assert that an already built payload may be appended.

    The amount must already be in canonical form; a payload that would need
    normalization was not built through make_payload().

    Raises:
        InvalidPayload: If the payload is not eligible
    """
    if not isinstance(payload, Payload):
        raise InvalidPayload(f"Expected Payload, got {type(payload).__name__}")
    for name in ('sender', 'receiver'):
        party = getattr(payload, name)
        if not isinstance(party, str) or not party.strip():
            raise InvalidPayload(f"{name.capitalize()} cannot be empty")
    if not isinstance(payload.amount, str):
        raise InvalidPayload("Amount must be stored as canonical text")

    canonical = canonical_amount(payload.amount)
    if canonical != payload.amount:
        raise InvalidPayload(
            f"Amount {payload.amount!r} is not canonical (expected {canonical!r})"
        )


# ============================================================================
# Serialization
# ============================================================================

def serialize(payload: Payload) -> str:
    """
    Canonical string form of a payload, used as hash input.

    Compact JSON with a fixed key order. The amount is a JSON string so its
    canonical decimal text is hashed verbatim.

    Example:
        >>> serialize(Payload("alice", "bob", "2.5"))
        '{"sender":"alice","receiver":"bob","amount":"2.5"}'
    """
    return json.dumps(payload.to_dict(), separators=(',', ':'), ensure_ascii=True)
