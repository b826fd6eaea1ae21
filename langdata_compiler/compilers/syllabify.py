"""
Syllabify Rule Compiler - Legal syllable-initial consonant clusters.

Source:
    <syllabifyRules xmlns="http://schemas.microsoft.com/tts">
      <initialConsonants><phone value="s"/><phone value="t"/></initialConsonants>
    </syllabifyRules>

Layout:
    i32 count
    count x u16 ids[4]   (phone ids, zero terminated and padded)
"""

from __future__ import annotations

from pathlib import Path

from langdata_compiler.binary import BinaryWriter
from langdata_compiler.errors import ErrorKind, ErrorSet, Severity
from langdata_compiler.rawdata.loaders import descend, parse_xml
from langdata_compiler.rawdata.models import PhoneSet

MAX_RULE_LENGTH = 3


class SyllabifyRuleError(ErrorKind):
    RULE_LENGTH_EXCEEDED = ("Syllabify Rule length is over {0}, {1}.", Severity.WARNING)
    INVALID_PHONE = ("Invalid phone /{0}/ is found in syllabify rule.", Severity.MUST_FIX)
    INVALID_PHONE_SET = ("Invalid phoneset for compiling syllabify rule.", Severity.MUST_FIX)


def compile_syllabify_rule(path: str | Path, phone_set: PhoneSet) -> tuple[bytes, ErrorSet]:
    errors = ErrorSet()
    if phone_set.validate().contains(Severity.MUST_FIX):
        errors.add(SyllabifyRuleError.INVALID_PHONE_SET)
        return b"", errors

    root = parse_xml(path, "syllabifyRules")
    rules: list[list[int]] = []
    for element in descend(root, "initialConsonants"):
        values = [phone.get("value", "") for phone in descend(element, "phone")]
        if len(values) > MAX_RULE_LENGTH:
            errors.add(SyllabifyRuleError.RULE_LENGTH_EXCEEDED, MAX_RULE_LENGTH, " ".join(values))
            continue

        ids = []
        for value in values:
            phone = phone_set.get_phone(value)
            if phone is None:
                errors.add(SyllabifyRuleError.INVALID_PHONE, value)
                continue
            ids.append(phone.id)
        rules.append(ids)

    writer = BinaryWriter()
    writer.write_i32(len(rules))
    for ids in rules:
        for phone_id in ids + [0] * (MAX_RULE_LENGTH + 1 - len(ids)):
            writer.write_u16(phone_id)
    return writer.getvalue(), errors
