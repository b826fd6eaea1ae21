"""
Raw Data Models - In-memory forms of the loaded raw sources.

Loaders in ``langdata_compiler.rawdata.loaders`` build these objects from
XML tables; module compilers consume them. Validation that depends only on
the object itself (duplicate names, zero ids) lives here so that several
compilers can share it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntFlag

from langdata_compiler.errors import ErrorKind, ErrorSet, InvalidDataError, Severity
from langdata_compiler.languages import Language

RUNTIME_FEATURE_MASK = 0xFFFFFFFF


class PhoneFeature(IntFlag):
    """Articulatory phone features; the runtime keeps the low 32 bits."""

    SILENCE = 0
    VOWEL = 1 << 0
    CONSONANT = 1 << 1
    SONORANT = 1 << 2
    VOICED = 1 << 3
    ASPIRATED = 1 << 4
    PLOSIVE = 1 << 5
    FRICATIVE = 1 << 6
    AFFRICATE = 1 << 7
    NASAL = 1 << 8
    LIQUID = 1 << 9
    GLIDE = 1 << 10
    BILABIAL = 1 << 11
    LABIODENTAL = 1 << 12
    DENTAL = 1 << 13
    ALVEOLAR = 1 << 14
    PALATAL = 1 << 15
    VELAR = 1 << 16
    GLOTTAL = 1 << 17
    HIGH = 1 << 18
    MIDHEIGHT = 1 << 19
    LOW = 1 << 20
    MIDLOW = 1 << 20
    FRONT = 1 << 21
    CENTRAL = 1 << 22
    BACK = 1 << 23
    ROUND = 1 << 24
    SHORT = 1 << 25
    LONG = 1 << 26
    DIPHTHONG = 1 << 27
    MAINSTRESS = 1 << 28
    SUBSTRESS = 1 << 29
    SYLLABLE = 1 << 30
    TONE = 1 << 31
    SHORTPAUSE = 1 << 32
    APPROXIMANT = (1 << 9) | (1 << 10)
    TRILL = 1 << 33
    TAP = 1 << 34
    LATERAL = 1 << 35
    POSTALVEOLAR = 1 << 36
    RETROFLEX = 1 << 37
    UVULAR = 1 << 38
    PHARYNGEAL = 1 << 39

    @classmethod
    def parse(cls, name: str) -> "PhoneFeature | None":
        """Feature by name, case-insensitive; None if unknown."""
        return cls.__members__.get(name.strip().upper())


class PhoneSetError(ErrorKind):
    UNRECOGNIZED_PHONE_FEATURE = (
        "Phone /{0}/ error: Unrecognized phone feature [{1}].", Severity.WARNING)
    DUPLICATE_PHONE_NAME = (
        "Phone /{0}/ error: Duplicate phone name (case-insensitive) /{0}/.", Severity.MUST_FIX)
    DUPLICATE_PHONE_ID = ("Phone /{0}/ error: Duplicate phone id [{1}].", Severity.MUST_FIX)
    EMPTY_PHONE_SET = ("Phone set error: Phone set is empty.", Severity.MUST_FIX)
    UNSUPPORTED_FEATURE_IN_RUNTIME = (
        "Phone set warning: Phone /{0}/ has feature /{1}/ which is unsupported in runtime.",
        Severity.WARNING)
    ZERO_ID = ("Phone /{0}/ error: Zero id is forbidden.", Severity.MUST_FIX)
    PHONE_NAME_TOO_LONG = (
        "Phone /{0}/ error: phone length exceeds the maximal number of {1}.", Severity.MUST_FIX)


class PosSetError(ErrorKind):
    DUPLICATE_POS_NAME = ("POS /{0}/ error: Duplicate POS name with id [{1}].", Severity.MUST_FIX)
    DUPLICATE_POS_ID = ("POS /{0}/ error: Duplicate POS id [{1}].", Severity.MUST_FIX)
    EMPTY_POS_SET = ("POS set error: POS set is empty.", Severity.MUST_FIX)


@dataclass
class Phone:
    """One phone of a phone set."""

    name: str
    id: int
    features: PhoneFeature = PhoneFeature.SILENCE

    @property
    def runtime_feature(self) -> int:
        return int(self.features) & RUNTIME_FEATURE_MASK

    def has_feature(self, feature: PhoneFeature) -> bool:
        return bool(self.features & feature)


@dataclass
class PhoneSet:
    """Ordered phone inventory of a language.

    Phones keep their table order; compiled records follow it.
    """

    language: Language = Language.NEUTRAL
    phones: list[Phone] = field(default_factory=list)

    MAX_NAME_LENGTH = 8

    def get_phone(self, name: str) -> Phone | None:
        """Phone by name, case-insensitive."""
        wanted = name.strip().upper()
        for phone in self.phones:
            if phone.name.upper() == wanted:
                return phone
        return None

    def is_phone(self, name: str) -> bool:
        return self.get_phone(name) is not None

    def validate(self) -> ErrorSet:
        """Structural checks the runtime relies on."""
        errors = ErrorSet()
        if not self.phones:
            errors.add(PhoneSetError.EMPTY_PHONE_SET)
            return errors

        names: set[str] = set()
        ids: set[int] = set()
        for phone in self.phones:
            upper = phone.name.upper()
            if upper in names:
                errors.add(PhoneSetError.DUPLICATE_PHONE_NAME, phone.name)
            names.add(upper)

            if phone.id in ids:
                errors.add(PhoneSetError.DUPLICATE_PHONE_ID, phone.name, phone.id)
            ids.add(phone.id)

            if phone.id == 0:
                errors.add(PhoneSetError.ZERO_ID, phone.name)

            if len(phone.name) > self.MAX_NAME_LENGTH:
                errors.add(PhoneSetError.PHONE_NAME_TOO_LONG, phone.name, self.MAX_NAME_LENGTH)

            for feature in PhoneFeature:
                if feature.value > RUNTIME_FEATURE_MASK and feature.value & phone.features == feature.value:
                    errors.add(PhoneSetError.UNSUPPORTED_FEATURE_IN_RUNTIME, phone.name, feature.name)
        return errors


class PosSet:
    """Part-of-speech name to id table, in insertion order."""

    def __init__(self, language: Language = Language.NEUTRAL):
        self.language = language
        self.items: dict[str, int] = {}
        self.ids: dict[int, str] = {}
        self.errors = ErrorSet()

    def add(self, name: str, pos_id: int) -> bool:
        """Add a POS; duplicates are reported in ``errors`` and skipped."""
        if name in self.items:
            self.errors.add(PosSetError.DUPLICATE_POS_NAME, name, pos_id)
            return False
        if pos_id in self.ids:
            self.errors.add(PosSetError.DUPLICATE_POS_ID, name, pos_id)
            return False
        self.items[name] = pos_id
        self.ids[pos_id] = name
        return True

    def validate(self) -> ErrorSet:
        errors = ErrorSet().merge(self.errors)
        if not self.items:
            errors.add(PosSetError.EMPTY_POS_SET)
        return errors

    def __contains__(self, name: object) -> bool:
        return name in self.items

    def __len__(self) -> int:
        return len(self.items)


@dataclass
class AttributeValue:
    name: str
    id: int
    pos_tagging: bool = False
    categories: list["AttributeCategory"] = field(default_factory=list)


@dataclass
class AttributeCategory:
    name: str
    id: int = 0
    values: list[AttributeValue] = field(default_factory=list)


@dataclass
class LexicalSchema:
    """Lexical attribute schema; the first category lists the POS values."""

    language: Language = Language.NEUTRAL
    categories: list[AttributeCategory] = field(default_factory=list)

    POS_CATEGORY = "POS"

    def pos_tagging_set(self) -> PosSet:
        """POS values flagged for tagging, collected depth-first.

        Raises:
            InvalidDataError: If the first category is not the POS category.
        """
        if not self.categories or self.categories[0].name != self.POS_CATEGORY:
            raise InvalidDataError("The first category of the lexical schema must be POS")

        pos_set = PosSet(self.language)

        def collect(category: AttributeCategory) -> None:
            for value in category.values:
                if value.pos_tagging:
                    pos_set.add(value.name, value.id)
                for sub in value.categories:
                    collect(sub)

        collect(self.categories[0])
        return pos_set


class CharType(Enum):
    LOWER_CASE = "LowerCase"
    UPPER_CASE = "UpperCase"
    DIGIT = "Digit"
    SYMBOL = "Symbol"


class CharFeature(IntFlag):
    NONE = 0
    VOWEL = 1 << 0
    CONSONANT = 1 << 2


@dataclass
class CharElement:
    """One character entry of the char table."""

    symbol: str
    isolated_readout: str = ""
    contextual_readout: str = ""
    pronunciation: str = ""
    feature: CharFeature = CharFeature.NONE
    char_type: CharType = CharType.SYMBOL

    @property
    def encoded_symbol(self) -> int:
        return ord(self.symbol[0]) if self.symbol else 0


@dataclass
class CharTable:
    language: Language = Language.NEUTRAL
    chars: list[CharElement] = field(default_factory=list)


class QuotationDirect(Enum):
    NEUTRAL = 0
    ORIENTED = 1


@dataclass
class QuotationMark:
    left: str
    right: str
    direct: QuotationDirect = QuotationDirect.NEUTRAL


@dataclass
class QuotationMarkTable:
    language: Language = Language.NEUTRAL
    items: list[QuotationMark] = field(default_factory=list)


@dataclass
class ParallelStructItem:
    text: str
    pos: str


@dataclass
class ParallelStructTable:
    language: Language = Language.NEUTRAL
    segment_items: list[ParallelStructItem] = field(default_factory=list)
    trigger_items: list[ParallelStructItem] = field(default_factory=list)


@dataclass
class WordFeatureSuffixTable:
    language: Language = Language.NEUTRAL
    noun_items: list[str] = field(default_factory=list)
    adj_items: list[str] = field(default_factory=list)
    verb_items: list[str] = field(default_factory=list)
    separator_items: list[str] = field(default_factory=list)
