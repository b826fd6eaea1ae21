"""
Polyphony Rule Validator - Content checks for the polyphone rule text file.

The rule file itself is compiled by the external rule compiler; this module
parses it first so that malformed lines, undeclared keys and conflicting
conditions are reported with line numbers.

File shape:

    CurW    # string;             // key declarations, first one is the primary key
    PrevW   # string;
    Pos     # int;

    [domain=address]              // optional domain of the next word
    CurW = "read";
    PrevW = "have" : "r eh d";    // conditions : pronunciation
    PrevW = "will" : "r iy d";
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from langdata_compiler.compilers.chartable import split_pronunciation
from langdata_compiler.errors import Error, ErrorKind, ErrorSet, Severity
from langdata_compiler.modules import GENERAL_DOMAIN
from langdata_compiler.rawdata.loaders import read_text_lines
from langdata_compiler.rawdata.models import PhoneSet

DECLARE_KEY = re.compile(r"^([a-zA-Z]+)[ \t]*#[ \t]*(string|int)[ \t]*;[ \t]*(//.*)?$")
CONDITION_LINE = re.compile(r'^(.*):[ \t]*"(.*)"[ \t]*;[ \t]*(//.*)?$')
COMMENT_LINE = re.compile(r"^[ \t]*//.*")
DOMAIN_LINE = re.compile(r"^(\[domain=)([a-zA-Z]+)*(\])$")
QUOTED_VALUE = re.compile(r'^"(.*)"$')

# Longer operators first: the first operator found in a condition wins.
OPERATORS = (
    "!~^", "!~=", "!~$", "!$", "!^", "!=",
    "~^", "~$", "~}", "~=", "~{",
    "<=", ">=", "=", "<", ">", "^", "$", "}", "{",
)


def key_line_pattern(key: str) -> re.Pattern:
    """Regex of an entry line ``key = "value";``."""
    return re.compile(rf'^{re.escape(key)}[ \t]*=[ \t]*"(.*)"[ \t]*;[ \t]*$')


class PolyRuleError(ErrorKind):
    MISS_PRIMARY_KEY = ("Can't find primary key name in polyphony file [{0}]", Severity.MUST_FIX)
    INVALID_LINE_FORMAT = ("Invalid file line format [Line {0}: {1}].", Severity.MUST_FIX)
    DUPLICATE_KEY_NAME = ("Duplicate declared key name [{0}].", Severity.MUST_FIX)
    PARSE_ERROR = ("Parse error in line [{0}].", Severity.MUST_FIX)
    MISS_KEY_VALUE_LINE = (
        "Can't find primary key line before parsing condition line [{0}].", Severity.MUST_FIX)
    INVALID_CONDITION_FORMAT = ("Invalid condition format : [{0}].", Severity.MUST_FIX)
    MISSING_OPERATOR_IN_CONDITION = (
        "Can't find operator in expression [{0}].", Severity.MUST_FIX)
    NOT_DECLARED_CONDITION_KEY = (
        "The condition key [{0}] has not been declared in expression [{1}].", Severity.MUST_FIX)
    NO_CONDITION_FOR_WORD = ("There is no valid condition for word [{0}].", Severity.MUST_FIX)
    DUPLICATE_WORD_DEFINITIONS = (
        "There are duplicate definitions of word [{0}].", Severity.MUST_FIX)
    DUPLICATE_RULE_CONDITIONS_FOR_DIFFERENT_PRON = (
        "There are duplicate conditions [{0}] defined for pronunciations [{1}] and [{2}] of word [{3}].",
        Severity.MUST_FIX)
    DUPLICATE_RULE_CONDITIONS_FOR_SAME_PRON = (
        "There are duplicate conditions [{0}] defined for pronunciation [{1}] of word [{2}].",
        Severity.WARNING)


class KeyType(Enum):
    STRING = "string"
    INT = "int"


@dataclass
class PolyphonyCondition:
    key: str
    operator: str
    value: str

    def render(self, key_types: dict[str, KeyType]) -> str:
        value = self.value
        if key_types.get(self.key) is KeyType.STRING:
            value = f'"{value}"'
        return f"{self.key} {self.operator} {value}"


@dataclass
class PolyphonyPron:
    """A pronunciation and the conditions selecting it."""

    pron: str
    conditions: list[PolyphonyCondition] = field(default_factory=list)

    def condition_string(self, key_types: dict[str, KeyType], sort: bool = False) -> str:
        parts = [condition.render(key_types) for condition in self.conditions]
        if sort:
            parts.sort()
        return " , ".join(parts)


@dataclass
class PolyphonyWord:
    """All pronunciations of one polyphonic word."""

    word: str
    domain: str = GENERAL_DOMAIN
    prons: list[PolyphonyPron] = field(default_factory=list)

    def check_duplicate_conditions(self, key_types: dict[str, KeyType]) -> ErrorSet:
        errors = ErrorSet()
        seen: dict[str, str] = {}
        for pron in self.prons:
            key = pron.condition_string(key_types, sort=True)
            if key not in seen:
                seen[key] = pron.pron
                continue
            if seen[key] == pron.pron:
                errors.add(PolyRuleError.DUPLICATE_RULE_CONDITIONS_FOR_SAME_PRON,
                           pron.condition_string(key_types), pron.pron, self.word)
            else:
                errors.add(PolyRuleError.DUPLICATE_RULE_CONDITIONS_FOR_DIFFERENT_PRON,
                           pron.condition_string(key_types), seen[key], pron.pron, self.word)
        return errors


class PolyphonyRuleFile:
    """
    Parsed polyphony rule file.

    Usage:
        rule_file = PolyphonyRuleFile()
        errors = rule_file.load("polyrule.txt", phone_set)
        for word in rule_file.words:
            print(word.word, len(word.prons))
    """

    def __init__(self):
        self.key_types: dict[str, KeyType] = {}
        self.primary_key = ""
        self.words: list[PolyphonyWord] = []
        self._key_line: re.Pattern | None = None
        self._condition: re.Pattern | None = None

    # =========================================================================
    # Loading
    # =========================================================================

    def load(self, path: str | Path, phone_set: PhoneSet | None = None) -> ErrorSet:
        """Parse ``path``; pronunciations are checked against ``phone_set`` if given."""
        errors = ErrorSet()
        self.key_types.clear()
        self.primary_key = ""
        self.words = []

        in_header = True
        domain = GENERAL_DOMAIN
        current: PolyphonyWord | None = None

        for line_number, line in enumerate(read_text_lines(path), start=1):
            line = line.strip()
            if not line or COMMENT_LINE.match(line):
                continue

            match = DOMAIN_LINE.match(line)
            if match:
                domain = (match.group(2) or GENERAL_DOMAIN).lower()
                continue

            if in_header:
                parse_errors = ErrorSet()
                declared = self._parse_declaration(line, parse_errors)
                self._add_parse_errors(errors, line_number, parse_errors)
                if declared:
                    continue
                in_header = False
                self._compile_patterns()

            if self._key_line is not None:
                match = self._key_line.match(line)
                if match:
                    if current is not None:
                        self._finish_word(current, errors, line_number)
                    current = PolyphonyWord(word=match.group(1), domain=domain)
                    domain = GENERAL_DOMAIN
                    continue

            match = CONDITION_LINE.match(line)
            if match and self._condition is not None:
                parse_errors = self._parse_condition_line(match, line, phone_set, current)
                self._add_parse_errors(errors, line_number, parse_errors)
                continue

            errors.add(PolyRuleError.INVALID_LINE_FORMAT, line_number, line)

        if current is not None:
            self.words.append(current)
        if not self.primary_key:
            errors.add(PolyRuleError.MISS_PRIMARY_KEY, str(path))

        seen: set[str] = set()
        for word in self.words:
            if word.word in seen:
                errors.add(PolyRuleError.DUPLICATE_WORD_DEFINITIONS, word.word)
            seen.add(word.word)
        for word in self.words:
            errors.merge(word.check_duplicate_conditions(self.key_types))
        return errors

    def _finish_word(self, word: PolyphonyWord, errors: ErrorSet, line_number: int) -> None:
        if word.prons:
            self.words.append(word)
            return
        parse_errors = ErrorSet()
        parse_errors.add(PolyRuleError.NO_CONDITION_FOR_WORD, word.word)
        self._add_parse_errors(errors, line_number, parse_errors)

    @staticmethod
    def _add_parse_errors(errors: ErrorSet, line_number: int, parse_errors: ErrorSet) -> None:
        for error in parse_errors:
            errors.add(Error(PolyRuleError.PARSE_ERROR, (line_number,),
                             severity=error.severity, inner=error))

    def _parse_declaration(self, line: str, errors: ErrorSet) -> bool:
        match = DECLARE_KEY.match(line)
        if match is None:
            return False
        name = match.group(1)
        if name in self.key_types:
            errors.add(PolyRuleError.DUPLICATE_KEY_NAME, name)
            return True
        self.key_types[name] = KeyType(match.group(2).lower())
        if not self.primary_key:
            self.primary_key = name
        return True

    def _compile_patterns(self) -> None:
        if self.primary_key:
            self._key_line = key_line_pattern(self.primary_key)

        operators = "|".join(re.escape(op) for op in OPERATORS)
        string_keys = [k for k, t in self.key_types.items() if t is KeyType.STRING]
        int_keys = [k for k, t in self.key_types.items() if t is KeyType.INT]
        alternatives = []
        if string_keys:
            alternatives.append(rf'(?:{"|".join(string_keys)})[ ]*(?:{operators})[ ]*"[^"]*"')
        if int_keys:
            alternatives.append(rf"(?:{'|'.join(int_keys)})[ ]*(?:{operators})[ ]*[+-]?[0-9]+")
        self._condition = re.compile("|".join(alternatives)) if alternatives else None

    # =========================================================================
    # Conditions
    # =========================================================================

    def _parse_condition_line(
        self,
        match: re.Match,
        line: str,
        phone_set: PhoneSet | None,
        word: PolyphonyWord | None,
    ) -> ErrorSet:
        errors = ErrorSet()
        if word is None:
            errors.add(PolyRuleError.MISS_KEY_VALUE_LINE, line)

        pron = PolyphonyPron(pron=match.group(2).strip())
        if pron.pron and phone_set is not None:
            _, pron_errors = split_pronunciation(pron.pron, phone_set)
            errors.merge(pron_errors)

        expressions = [m.group(0) for m in self._condition.finditer(match.group(1).strip())]
        if not expressions:
            errors.add(PolyRuleError.INVALID_CONDITION_FORMAT, line)
            return errors

        for expression in expressions:
            condition = self._parse_condition(expression.strip(), errors)
            if condition is not None:
                pron.conditions.append(condition)

        if word is not None and not errors.contains(Severity.MUST_FIX):
            word.prons.append(pron)
        return errors

    def _parse_condition(self, expression: str, errors: ErrorSet) -> PolyphonyCondition | None:
        head = expression
        if head.find('"') > 0:
            head = head[:head.index('"')]
        operator = next((op for op in OPERATORS if op in head), None)
        if operator is None:
            errors.add(PolyRuleError.MISSING_OPERATOR_IN_CONDITION, expression)
            return None

        position = expression.index(operator)
        key = expression[:position].strip()
        if key not in self.key_types:
            errors.add(PolyRuleError.NOT_DECLARED_CONDITION_KEY, key, expression)
            return None

        value = expression[position + len(operator):].strip()
        if self.key_types[key] is KeyType.STRING:
            quoted = QUOTED_VALUE.match(value)
            if quoted is None:
                errors.add(PolyRuleError.INVALID_CONDITION_FORMAT, expression)
                return None
            value = quoted.group(1)
        else:
            try:
                int(value)
            except ValueError:
                errors.add(PolyRuleError.INVALID_CONDITION_FORMAT, expression)
                return None
        return PolyphonyCondition(key=key, operator=operator, value=value)


def validate_polyphony_rule(path: str | Path, phone_set: PhoneSet | None = None) -> ErrorSet:
    """Content checks of a polyphony rule file."""
    return PolyphonyRuleFile().load(path, phone_set)
