"""
Languages - Language codes and Windows locale ids.

The container header and several module layouts store the numeric
locale id (LCID); raw data files carry the textual code in their
``lang`` attribute.
"""

from __future__ import annotations

from enum import Enum


class Language(Enum):
    """Supported languages, valued by their culture code."""

    NEUTRAL = "neutral"
    AR_EG = "ar-EG"
    AR_SA = "ar-SA"
    CA_ES = "ca-ES"
    CS_CZ = "cs-CZ"
    DA_DK = "da-DK"
    DE_DE = "de-DE"
    EL_GR = "el-GR"
    EN_AU = "en-AU"
    EN_CA = "en-CA"
    EN_GB = "en-GB"
    EN_IN = "en-IN"
    EN_US = "en-US"
    ES_ES = "es-ES"
    ES_MX = "es-MX"
    FI_FI = "fi-FI"
    FR_CA = "fr-CA"
    FR_FR = "fr-FR"
    HE_IL = "he-IL"
    HI_IN = "hi-IN"
    HU_HU = "hu-HU"
    ID_ID = "id-ID"
    IT_IT = "it-IT"
    JA_JP = "ja-JP"
    KO_KR = "ko-KR"
    NB_NO = "nb-NO"
    NL_NL = "nl-NL"
    PL_PL = "pl-PL"
    PT_BR = "pt-BR"
    PT_PT = "pt-PT"
    RO_RO = "ro-RO"
    RU_RU = "ru-RU"
    SV_SE = "sv-SE"
    TH_TH = "th-TH"
    TR_TR = "tr-TR"
    ZH_CN = "zh-CN"
    ZH_HK = "zh-HK"
    ZH_TW = "zh-TW"

    @property
    def code(self) -> str:
        return self.value

    @property
    def lcid(self) -> int:
        """Windows locale id."""
        return _LCIDS[self.value]

    @classmethod
    def from_code(cls, code: str | None) -> "Language":
        """Parse a culture code case-insensitively.

        Raises:
            ValueError: If the code is unknown.
        """
        if not code:
            return cls.NEUTRAL
        wanted = code.strip().lower()
        for language in cls:
            if language.value.lower() == wanted:
                return language
        raise ValueError(f"Unknown language: {code}")

    @classmethod
    def from_lcid(cls, lcid: int) -> "Language":
        for language in cls:
            if language.lcid == lcid:
                return language
        raise ValueError(f"Unknown language id: {lcid}")


_LCIDS = {
    "neutral": 0,
    "ar-EG": 3073,
    "ar-SA": 1025,
    "ca-ES": 1027,
    "cs-CZ": 1029,
    "da-DK": 1030,
    "de-DE": 1031,
    "el-GR": 1032,
    "en-AU": 3081,
    "en-CA": 4105,
    "en-GB": 2057,
    "en-IN": 16393,
    "en-US": 1033,
    "es-ES": 3082,
    "es-MX": 2058,
    "fi-FI": 1035,
    "fr-CA": 3084,
    "fr-FR": 1036,
    "he-IL": 1037,
    "hi-IN": 1081,
    "hu-HU": 1038,
    "id-ID": 1057,
    "it-IT": 1040,
    "ja-JP": 1041,
    "ko-KR": 1042,
    "nb-NO": 1044,
    "nl-NL": 1043,
    "pl-PL": 1045,
    "pt-BR": 1046,
    "pt-PT": 2070,
    "ro-RO": 1048,
    "ru-RU": 1049,
    "sv-SE": 1053,
    "th-TH": 1054,
    "tr-TR": 1055,
    "zh-CN": 2052,
    "zh-HK": 3076,
    "zh-TW": 1028,
}
