"""
Record identifier grammar: ``PREFIX-LETTERSNNNNN``.

LETTERS is a bijective base-26 numeral (A..Z, AA, AB, ... as in spreadsheet
column names) and NNNNN is a zero-padded serial in [1, 99999]. When the serial
overflows it wraps to 1 and the letters advance by one.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

MAX_NUMBER = 99999
NUMBER_WIDTH = 5


@dataclass(frozen=True)
class SerialNumber:
    letters: str
    number: int


@dataclass(frozen=True)
class RecordIdentifier:
    prefix: str
    serial: SerialNumber

    @property
    def text(self) -> str:
        return encode(self.serial, self.prefix)

    def __str__(self) -> str:
        return self.text


BOOTSTRAP = SerialNumber(letters="A", number=1)


def _letters(letters: Optional[str]) -> str:
    s = (letters or "").strip().upper()
    return s or "A"


def _pattern(prefix: str) -> "re.Pattern[str]":
    return re.compile(rf"^{re.escape(prefix.upper())}-([A-Z]+)(\d{{{NUMBER_WIDTH}}})$")


def decode(text: Optional[str], prefix: str) -> Optional[SerialNumber]:
    """Parse ``text`` against ``prefix``. Returns None when it does not match."""
    if text is None:
        return None
    m = _pattern(prefix).match(str(text).strip().upper())
    if not m:
        return None
    return SerialNumber(letters=m.group(1), number=int(m.group(2)))


def encode(serial: SerialNumber, prefix: str) -> str:
    return f"{prefix}-{_letters(serial.letters)}{serial.number:0{NUMBER_WIDTH}d}"


def alpha_value(letters: str) -> int:
    """Bijective base-26 value: A=1, Z=26, AA=27."""
    n = 0
    for ch in letters:
        if not ("A" <= ch <= "Z"):
            raise ValueError(f"invalid identifier letters: {letters!r}")
        n = n * 26 + (ord(ch) - 64)
    return n


def _int_to_alpha(n: int) -> str:
    out = ""
    while n > 0:
        n, rem = divmod(n - 1, 26)
        out = chr(65 + rem) + out
    return out


def next_alpha(letters: Optional[str]) -> str:
    """A -> B, Z -> AA, AZ -> BA, ZZ -> AAA."""
    return _int_to_alpha(alpha_value(_letters(letters)) + 1)


def increment(serial: SerialNumber) -> SerialNumber:
    letters = _letters(serial.letters)
    number = int(serial.number) + 1
    if number > MAX_NUMBER:
        return SerialNumber(letters=next_alpha(letters), number=1)
    return SerialNumber(letters=letters, number=number)
