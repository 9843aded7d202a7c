"""
Student identifier validation and the keypad input buffer.

An identifier is four digits: grade (1-9), room (1-9), number (01-99).
"""

from __future__ import annotations

from dataclasses import dataclass

from kiosk._types import Result, Ok, Error

IDENTIFIER_LENGTH = 4


@dataclass(frozen=True, slots=True)
class StudentCode:
    grade: int
    room: int
    number: int

    def __str__(self) -> str:
        return f"{self.grade}{self.room}{self.number:02d}"


def parse_identifier(code: str) -> Result[StudentCode, str]:
    """
    Parse a typed identifier.

    Example:
        parse_identifier("2314")  # Ok(StudentCode(grade=2, room=3, number=14))
        parse_identifier("0099")  # Error("grade must be 1-9")
    """
    if len(code) != IDENTIFIER_LENGTH or not code.isascii() or not code.isdigit():
        return Error(f"expected {IDENTIFIER_LENGTH} digits")
    grade, room, number = int(code[0]), int(code[1]), int(code[2:])
    if not 1 <= grade <= 9:
        return Error("grade must be 1-9")
    if not 1 <= room <= 9:
        return Error("room must be 1-9")
    if not 1 <= number <= 99:
        return Error("number must be 1-99")
    return Ok(StudentCode(grade, room, number))


def is_valid_identifier(code: str) -> bool:
    return isinstance(parse_identifier(code), Ok)


class IdentifierInput:
    """
    On-screen keypad buffer.

    Example:
        keypad = IdentifierInput()
        for key in "2314":
            keypad.press(key)
        keypad.is_valid  # True
    """

    __slots__ = ("_digits",)

    def __init__(self, value: str = "") -> None:
        self._digits = ""
        for key in value:
            self.press(key)

    @property
    def value(self) -> str:
        return self._digits

    @property
    def is_valid(self) -> bool:
        return is_valid_identifier(self._digits)

    def press(self, key: str) -> bool:
        """Append one digit. Ignored when full or not a digit."""
        if len(key) != 1 or not key.isdigit() or len(self._digits) >= IDENTIFIER_LENGTH:
            return False
        self._digits += key
        return True

    def delete(self) -> None:
        self._digits = self._digits[:-1]

    def clear(self) -> None:
        self._digits = ""


__all__ = (
    "IDENTIFIER_LENGTH",
    "StudentCode",
    "parse_identifier",
    "is_valid_identifier",
    "IdentifierInput",
)
