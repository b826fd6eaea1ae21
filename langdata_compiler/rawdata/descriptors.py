"""
Raw Data Descriptors - One entry per known raw source.

A descriptor knows where its source lives relative to the data root, how
to load it, and remembers the outcome of its single load attempt.

Relative paths may be templated by language:
    {lang}   culture code, e.g. "en-US"
    {lcid}   decimal locale id, e.g. "1033"
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable

from langdata_compiler.errors import ErrorSet
from langdata_compiler.languages import Language
from langdata_compiler.rawdata import loaders

Loader = Callable[[Path, Language], "tuple[Any, ErrorSet]"]


class RawDataKind(Enum):
    """How a raw source is located."""

    FILE = "file"
    DIRECTORY = "directory"
    CONFIG = "config"


@dataclass
class RawDataDescriptor:
    """
    Location and load state of one raw source.

    Attributes:
        name: Stable key.
        template: Relative path template below the data root.
        loader: Callable turning the resolved path into an object.
        kind: File, directory, or configuration string.
        language: Language the descriptor is rendered for.
        relative_path: Rendered template; cleared by a path override.
        path: Resolved path, or None.
        value: Configuration string for CONFIG descriptors.
        obj: Loaded object, set at most once.
        load_attempted: True once a load was tried.
    """

    name: str
    template: str = ""
    loader: Loader = loaders.load_path
    kind: RawDataKind = RawDataKind.FILE
    language: Language = Language.NEUTRAL
    relative_path: str = ""
    path: Path | None = None
    value: str = ""
    obj: Any = None
    load_attempted: bool = False
    path_from_root: bool = field(default=False, repr=False)

    def __post_init__(self):
        if not self.relative_path:
            self.relative_path = self.render(self.language)

    @property
    def templated(self) -> bool:
        return "{" in self.template

    def render(self, language: Language) -> str:
        """Relative path for ``language``."""
        if not self.template:
            return ""
        return self.template.format(lang=language.code, lcid=language.lcid)

    def reset(self) -> None:
        """Forget the cached object and the load attempt."""
        self.obj = None
        self.load_attempted = False


_FILE = RawDataKind.FILE
_DIRECTORY = RawDataKind.DIRECTORY

# name, relative path template, kind, loader
DEFAULT_RAW_DATA: tuple[tuple[str, str, RawDataKind, Loader], ...] = (
    ("Lexicon", "Lexicon/Lexicon/Lexicon.xml", _FILE, loaders.load_path),
    ("LexicalAttributeSchema", "Lexicon/Lexicon/schema.xml", _FILE, loaders.load_lexical_schema),
    ("PosSet", "Lexicon/Lexicon/postable.xml", _FILE, loaders.load_pos_set),
    ("PhoneSet", "Lexicon/Lexicon/phoneset.xml", _FILE, loaders.load_phone_set),
    ("BackendPhoneSet", "Lexicon/Lexicon/Backendphoneset.xml", _FILE, loaders.load_phone_set),
    ("CharTable", "TAData/Misc/chartable.xml", _FILE, loaders.load_char_table),
    ("SyllabifyRule", "TAData/SyllabifyRules.xml", _FILE, loaders.load_path),
    ("TruncateRule", "TAData/TruncateRules.xml", _FILE, loaders.load_path),
    ("PauseLength", "TAData/Misc/PauseLength.xml", _FILE, loaders.load_path),
    ("PolyphoneRule", "Rules/PolyRule/polyrule.txt", _FILE, loaders.load_path),
    ("BoundaryPronChangeRule",
     "Rules/BoundaryPronChangeRule/BoundaryPronChangeRule.txt", _FILE, loaders.load_path),
    ("SentenceDetectRule", "Rules/SentDetectRule/SentDetectRule.txt", _FILE, loaders.load_path),
    ("QuotationMarkTable", "TAData/Misc/QuotationMarkTable.xml", _FILE,
     loaders.load_quotation_mark_table),
    ("ParallelStructTable", "TAData/Misc/ParallelStructTable.xml", _FILE,
     loaders.load_parallel_struct_table),
    ("WordFeatureSuffixTable", "TAData/Misc/WordFeatureSuffixTable.xml", _FILE,
     loaders.load_word_feature_suffix_table),
    ("PosLexicalRule", "Rules/PostaggerRule/{lang}_lexical_rule", _FILE, loaders.load_path),
    ("PosContextualRule", "Rules/PostaggerRule/{lang}_context_rule", _FILE, loaders.load_path),
    ("TnRule", "Rules/TnRule/tn{lcid}.xml", _FILE, loaders.load_path),
    ("FstNERule", "Rules/TnRule/tn{lcid}.xml", _FILE, loaders.load_path),
    ("CompoundRule", "TAData/Compound.xml", _FILE, loaders.load_path),
    ("LtsRuleDataPath", "Lexicon/lts", _DIRECTORY, loaders.load_path),
    ("WordBreakerDataPath", "TAData", _DIRECTORY, loaders.load_path),
    ("PostWordBreaker", "TAData/postwordbreaker.txt", _FILE, loaders.load_path),
    ("ChineseTone", "TAData/Lexicon/chinesetone.txt", _FILE, loaders.load_path),
    ("SentenceSeparatorDataPath", "TAData", _DIRECTORY, loaders.load_path),
    ("PhoneMappingRule", "Rules/PhoneMappingRule/tnml_PhoneMapping.xml", _FILE, loaders.load_path),
    ("BackendPhoneMappingRule",
     "Rules/PhoneMappingRule/tnml_BackendPhoneMapping.xml", _FILE, loaders.load_path),
    ("FrontendBackendPhoneMappingRule",
     "Rules/PhoneMappingRule/tnml_FrontendBackendPhoneMapping.xml", _FILE, loaders.load_path),
    ("MixLingualPOSConverterData", "Rules/POS/tnml_POSConverter.xml", _FILE, loaders.load_path),
    ("ForeignLtsCollection", "", RawDataKind.CONFIG, loaders.load_path),
    ("AcronymDisambiguation", "Rules/AcronymDisambiguation", _DIRECTORY, loaders.load_path),
    ("NEDisambiguation", "Rules/NEDisambiguation", _DIRECTORY, loaders.load_path),
    ("PolyphonyModel", "Rules/PolyphonyModel", _DIRECTORY, loaders.load_path),
    ("RNNPolyphonyModel", "Rules/RNNPolyphonyModel", _FILE, loaders.load_path),
)


def default_descriptors(language: Language = Language.NEUTRAL) -> list[RawDataDescriptor]:
    """Fresh descriptors for every known raw source."""
    return [
        RawDataDescriptor(name=name, template=template, kind=kind, loader=loader, language=language)
        for name, template, kind, loader in DEFAULT_RAW_DATA
    ]
