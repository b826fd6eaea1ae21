"""
Module Tokens - Reserved identifiers of every compiled module.

This table is shared with the runtime that reads the container: a token
identifies a module inside the file, so an existing entry must never be
renumbered. Some tokens are reserved for modules the runtime knows about
but this compiler does not build; they stay listed so that a prebuilt
blob can still be registered under its proper token.
"""

from __future__ import annotations

import uuid

MODULE_TOKENS: dict[str, str] = {
    "SentenceSeparator": "E67AB014-65F6-4e5e-9C1E-2E3A06E9B212",
    "WordBreaker": "629AA5C4-4D13-4bb8-BC17-D830F2517726",
    "CRFWordBreaker": "B15E4E27-AB10-473A-9A43-77108DAD4691",
    "ChineseTone": "B85C9DA5-FC54-4F19-B222-B038EFBFC108",
    "PostWordBreaker": "99CC36F3-1480-4BE7-B3CD-3479C7915BC7",
    "PhoneSet": "29A5584B-5A6F-4d4d-BC81-7B524468FE8C",
    "BackendPhoneSet": "B3526045-39E7-4539-BEB1-8429C732800A",
    "PolyphoneRule": "E849E61B-0D76-41ee-BB54-E3250CFD21C3",
    "PosSet": "370AD112-0D2D-4997-B687-CA76B4DFE4F3",
    "PosRule": "0CB71848-B746-4fa8-B7E2-4671BCDDB483",
    "RNNPos": "3235B923-C8B6-47ED-AF97-8F763924DB13",
    "CharTable": "F6E4F50A-83B8-4754-8CC9-D1F772268BF8",
    "CompoundRule": "19A6569A-BF1F-4e8d-A13E-F2DAF57DD66B",
    "FstNERule": "BFC4309D-57C4-4741-B1FF-83295B634B51",
    "LtsRule": "AC4AEFCF-6D8C-48b1-AF0E-BEB0E640BAE7",
    "RNNLts": "46EE52BA-2CC3-4330-B7AA-D14BFA521B75",
    "Lexicon": "7BD71F46-E7B1-4564-ADEE-81354818A303",
    "SentenceDetector": "00A2359E-C05F-4182-AACC-31BEF50D04EF",
    "QuotationMarkTable": "B54490E3-050B-4f66-9C01-76BF4E35A648",
    "ParallelStructTable": "D8951565-F16D-46c6-A2C8-C2107F9EAEA1",
    "WordFeatureSuffixTable": "5554BA64-7557-436D-9D6F-D5D1D7AFB2D3",
    "PhoneMappingRule": "388B0327-FDA5-478b-B871-163F689E40A8",
    "BackendPhoneMappingRule": "718AA21F-6046-4AD9-B44F-FE1CF6F4E131",
    "FrontendBackendPhoneMappingRule": "FEA3B45B-E901-40F1-8E0B-20E5466AA361",
    "MixLingualPOSConverterData": "7758AA3C-B01F-459E-8379-3884189AA909",
    "FrenchLiaisonRule": "5E76C15C-4F92-4892-9964-1FB530954878",
    "BoundaryPronChangeRule": "CDC85643-3D56-4fba-8C72-9ADD1B7E5894",
    "UnitGenerator": "9D9E8526-B5A4-44d9-AA97-FE02C38D23AD",
    "SyllabifyRule": "78F6770D-6248-4b38-9D11-C099EFD046B1",
    "TnRule": "7D5841AB-516F-42c0-A64C-C6E3166668D2",
    "PosTaggerPos": "F81FD1D1-6FEC-4e0d-8893-F4B94152D5B0",
    "LangIdentifierRule": "EFDC81F5-3EB0-4db3-9EFA-C8EC49B1C265",
    "ProsodyModelBR0": "01BE6345-BBB6-431E-BD4E-919D1D7B13AA",
    "ProsodyModelBR2": "5E699FE4-244C-49FB-A8FF-51DAB144C049",
    "ProsodyModelACT": "D38D494E-0BE1-4F39-8316-D29ACDF82E4D",
    "ForeignLtsCollection": "6F4AC239-EA18-428d-8370-C386CFB694DC",
    "AcronymDisambiguation": "CEA1BE6F-CDAA-4e01-BDEC-49AB604D334E",
    "NEDisambiguation": "611DDB18-4B46-4694-B28F-9ED461D560D7",
    "PhoneEventData": "9ABDA282-9734-48C8-BA24-F6B55F7BE721",
    "PolyphonyModel": "D49F77B9-8982-4860-9D5D-55919CF4F54E",
    "RNNPolyphonyModel": "6DE01F86-0DA8-4A23-830B-3730F0325198",
    "CRFSentTypeDetectorModel": "3292D97F-C52C-4143-AA89-DF847F5C4406",
}

# Word breaker payload formats.
WORD_BREAKER_NEW_FORMAT = "C4235FEF-CC38-4597-8928-ADD7CB186C79"
WORD_BREAKER_OLD_FORMAT = "86405BC7-8654-4cc5-82BD-19A220DBA0BA"

_DEFAULT_FORMATS: dict[str, str] = {
    "WordBreaker": WORD_BREAKER_OLD_FORMAT,
}

# Modules a general-domain container cannot do without.
NECESSARY_MODULES: tuple[str, ...] = (
    "PhoneSet",
    "PosTaggerPos",
    "Lexicon",
    "CharTable",
    "UnitGenerator",
)

GENERAL_DOMAIN = "general"


def reserved_token(name: str) -> str | None:
    """Reserved token string of a module, or None."""
    return MODULE_TOKENS.get(name)


def module_for_token(token: str | uuid.UUID) -> str | None:
    """Module name that owns ``token`` (case-insensitive)."""
    wanted = str(token).strip("{}").lower()
    for name, value in MODULE_TOKENS.items():
        if value.lower() == wanted:
            return name
    return None


def default_format_token(name: str) -> str | None:
    """Format token used when a module is registered without one."""
    if name in _DEFAULT_FORMATS:
        return _DEFAULT_FORMATS[name]
    return MODULE_TOKENS.get(name)


def parse_token(value: str | uuid.UUID) -> uuid.UUID:
    """Parse a 128-bit token.

    Raises:
        ValueError: If ``value`` is not a valid token string.
    """
    if isinstance(value, uuid.UUID):
        return value
    return uuid.UUID(value.strip())


def canonical_token(value: str | uuid.UUID) -> str:
    """Canonical string form used for ordering inside the container."""
    return str(parse_token(value)).upper()
