# SPDX-License-Identifier: MIT
"""Permission-mode grammar: octal, long symbolic, and short symbolic strings.

Grammars are tried in a fixed order and the first one that claims the input
wins. An all-octal-digit string is always octal, even when it is nine
characters long and could otherwise pass for ``rwx`` notation.
"""

from __future__ import annotations

_OCTAL_DIGITS = frozenset("01234567")
_DECIMAL_DIGITS = frozenset("0123456789")
_LONG_SYMBOLIC_CHARS = frozenset("rwx-")
_OPERATORS = "=+-"

_PERM_BITS = {"r": 0b100, "w": 0b010, "x": 0b001}
_CLASS_SLOTS = {"u": 0, "g": 1, "o": 2}


class AuditError(ValueError):
    """Raised when a permission mode string cannot be parsed."""


class InvalidOctalMode(AuditError):
    def __init__(self) -> None:
        super().__init__("Invalid octal mode")


class InvalidSymbolicMode(AuditError):
    def __init__(self) -> None:
        super().__init__("Invalid symbolic mode")


class InvalidShortSymbolicFormat(AuditError):
    def __init__(self) -> None:
        super().__init__("Invalid short symbolic mode format")


class _CharError(AuditError):
    label = ""

    def __init__(self, char: str) -> None:
        self.char = char
        super().__init__(f"{self.label}: {char}")


class InvalidPermissionChar(_CharError):
    label = "Invalid permission char"


class InvalidClass(_CharError):
    label = "Invalid class"


class InvalidOperator(_CharError):
    label = "Invalid operator"


def _parse_octal(text: str) -> int:
    try:
        return int(text, 8)
    except ValueError as exc:
        raise InvalidOctalMode() from exc


def _parse_long_symbolic(text: str) -> int:
    mode = 0
    for i, char in enumerate(text):
        if char == "-":
            continue
        if char not in _PERM_BITS:
            raise InvalidSymbolicMode()
        mode |= 1 << (8 - i)
    return mode


def _parse_short_symbolic(text: str) -> int:
    """Apply ``u=rw,g+r,o-x`` style clauses left to right, starting from zero."""
    slots = [0, 0, 0]  # user, group, other
    touched = False

    for clause in text.split(","):
        clause = clause.strip()
        if not clause:
            continue

        op_index = next((i for i, c in enumerate(clause) if c in _OPERATORS), None)
        if op_index is None:
            raise InvalidShortSymbolicFormat()
        classes, op, perms = clause[:op_index], clause[op_index], clause[op_index + 1 :]

        mask = 0
        for char in perms:
            if char not in _PERM_BITS:
                raise InvalidPermissionChar(char)
            mask |= _PERM_BITS[char]

        for char in classes:
            if char not in _CLASS_SLOTS:
                raise InvalidClass(char)
            slot = _CLASS_SLOTS[char]
            if op == "=":
                slots[slot] = mask
            elif op == "+":
                slots[slot] |= mask
            elif op == "-":
                slots[slot] &= ~mask
            else:
                # unreachable while op is taken from _OPERATORS
                raise InvalidOperator(op)
            touched = True

    if not touched:
        raise AuditError("Invalid mode format")
    return (slots[0] << 6) | (slots[1] << 3) | slots[2]


def parse_mode(text: str) -> int:
    """Parse ``"640"``, ``"rw-r-----"`` or ``"u=rw,g=r,o="`` into a numeric mode.

    Octal input is returned as written and may exceed ``0o777``; callers that
    need the 9-bit range check or mask it themselves.

    Raises:
        AuditError: One of its subclasses when the string fits no grammar.
    """
    if text and all(c in _OCTAL_DIGITS for c in text):
        return _parse_octal(text)
    if text and all(c in _DECIMAL_DIGITS for c in text):
        # numeric but holds an 8 or 9
        raise InvalidOctalMode()

    if len(text) == 9 and all(c in _LONG_SYMBOLIC_CHARS for c in text):
        return _parse_long_symbolic(text)

    return _parse_short_symbolic(text)

