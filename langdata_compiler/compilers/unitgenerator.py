"""
Unit Generator Compiler - Nucleus truncation rules.

Source:
    <offline xmlns="http://schemas.microsoft.com/tts/toolsuite">
      <truncateRules>
        <truncateRule side="Right"><phone value="ax"/></truncateRule>
      </truncateRules>
    </offline>

Layout:
    i32 count
    count x {i32 direction, i16 ids[6]}

Direction is 1 for truncating from the left, 2 from the right and 0 when
the side is not recognized.
"""

from __future__ import annotations

from enum import IntEnum
from pathlib import Path

from langdata_compiler.binary import BinaryWriter
from langdata_compiler.errors import ErrorKind, ErrorSet, Severity
from langdata_compiler.rawdata.loaders import descend, parse_xml
from langdata_compiler.rawdata.models import PhoneSet

MAX_TRUNCATE_RULE_LENGTH = 5


class TruncateDirection(IntEnum):
    NONE = 0
    LEFT = 1
    RIGHT = 2


class UnitGeneratorError(ErrorKind):
    WRONG_RULE_SIDE = ("Trunc Rule side is wrong: {0} {1}.", Severity.WARNING)
    RULE_LENGTH_EXCEEDED = ("Trunc rule length is over {0} {1}.", Severity.WARNING)
    INVALID_PHONE = ("Invalid phone /{0}/ is found in Trunc rule.", Severity.WARNING)
    INVALID_PHONE_SET = ("Invalid phoneset for compiling unit generator data.", Severity.MUST_FIX)


def _direction(side: str) -> TruncateDirection | None:
    side = side.lower()
    if side == "right":
        return TruncateDirection.RIGHT
    if side == "left":
        return TruncateDirection.LEFT
    return None


def compile_unit_generator(path: str | Path, phone_set: PhoneSet) -> tuple[bytes, ErrorSet]:
    """Encode the truncate rules of ``path`` against ``phone_set``."""
    errors = ErrorSet()
    if phone_set.validate().contains(Severity.MUST_FIX):
        errors.add(UnitGeneratorError.INVALID_PHONE_SET)
        return b"", errors

    root = parse_xml(path, "offline")
    rules: list[tuple[TruncateDirection, list[int]]] = []
    for element in descend(root, "truncateRules", "truncateRule"):
        side = element.get("side", "")
        values = [phone.get("value", "") for phone in descend(element, "phone")]
        rule_text = " ".join(values)

        direction = _direction(side)
        if direction is None:
            errors.add(UnitGeneratorError.WRONG_RULE_SIDE, side, rule_text)
            direction = TruncateDirection.NONE

        if len(values) > MAX_TRUNCATE_RULE_LENGTH:
            errors.add(UnitGeneratorError.RULE_LENGTH_EXCEEDED, MAX_TRUNCATE_RULE_LENGTH, rule_text)
            continue

        ids = []
        for value in values:
            phone = phone_set.get_phone(value)
            if phone is None:
                errors.add(UnitGeneratorError.INVALID_PHONE, value)
                continue
            ids.append(phone.id)
        rules.append((direction, ids))

    writer = BinaryWriter()
    writer.write_i32(len(rules))
    for direction, ids in rules:
        writer.write_i32(int(direction))
        for phone_id in ids + [0] * (MAX_TRUNCATE_RULE_LENGTH + 1 - len(ids)):
            writer.write_i16(phone_id)
    return writer.getvalue(), errors
