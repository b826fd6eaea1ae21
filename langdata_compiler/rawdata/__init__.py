"""
Raw data access for the language data compiler.

Components:
    RawDataRegistry    - Name to raw source lookup, attempt-once loading
    RawDataDescriptor  - Location and load state of one raw source
    loaders            - XML and text parsers for the raw sources
    models             - In-memory phone sets, POS sets, schemas, tables
"""

from langdata_compiler.rawdata.descriptors import (
    DEFAULT_RAW_DATA,
    RawDataDescriptor,
    RawDataKind,
    default_descriptors,
)
from langdata_compiler.rawdata.registry import RawDataRegistry
from langdata_compiler.rawdata.models import (
    CharElement,
    CharFeature,
    CharTable,
    CharType,
    LexicalSchema,
    ParallelStructItem,
    ParallelStructTable,
    Phone,
    PhoneFeature,
    PhoneSet,
    PhoneSetError,
    PosSet,
    PosSetError,
    QuotationDirect,
    QuotationMark,
    QuotationMarkTable,
    WordFeatureSuffixTable,
)

__all__ = [
    # Descriptors
    "DEFAULT_RAW_DATA",
    "RawDataDescriptor",
    "RawDataKind",
    "default_descriptors",
    # Registry
    "RawDataRegistry",
    # Models
    "CharElement",
    "CharFeature",
    "CharTable",
    "CharType",
    "LexicalSchema",
    "ParallelStructItem",
    "ParallelStructTable",
    "Phone",
    "PhoneFeature",
    "PhoneSet",
    "PhoneSetError",
    "PosSet",
    "PosSetError",
    "QuotationDirect",
    "QuotationMark",
    "QuotationMarkTable",
    "WordFeatureSuffixTable",
]
