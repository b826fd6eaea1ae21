"""
Phone Event Compiler - Viseme and SAPI phone ids per TTS phone.

Layout, per phone of the phone set:
    i16 id
    u8  visemes[8]     (non-silent visemes of the phone's UPS phones, zero padded)
    u16 sapi_ids[7]    (zero padded)
    u16 0

Visemes and SAPI ids come from a PhoneConverter, normally backed by the
compiled phone mapping rule. Without a converter both sections are zero.
"""

from __future__ import annotations

import logging
from typing import Mapping, Protocol, Sequence

from langdata_compiler.binary import BinaryWriter
from langdata_compiler.errors import (
    DataCompilerError,
    ErrorKind,
    ErrorSet,
    FieldOverflowError,
    Severity,
)
from langdata_compiler.rawdata.models import PhoneSet

logger = logging.getLogger(__name__)

MAX_UPS_PHONES_PER_TTS = 7
MAX_SAPI_PHONES_PER_TTS = 7
SILENT_VISEME = 0

# UPS phone code -> viseme. Codes not listed (stress, tone, boundary and
# diacritic marks) map to the silent viseme.
VISEME_MAP: dict[int, int] = {
    97: 2, 98: 21, 99: 16, 100: 19, 101: 4, 102: 18, 103: 20, 104: 12,
    105: 6, 106: 6, 107: 20, 108: 14, 109: 21, 110: 19, 111: 8, 112: 21,
    113: 20, 114: 13, 115: 15, 116: 19, 117: 7, 118: 18, 119: 7, 120: 12,
    121: 4, 122: 15,
    230: 1, 231: 12, 240: 17, 248: 1, 295: 12, 331: 20, 339: 4,
    592: 4, 593: 2, 594: 2, 595: 21, 596: 3, 597: 16, 598: 19, 599: 19,
    600: 1, 601: 1, 602: 1, 603: 4, 604: 5, 605: 5, 606: 5, 607: 16,
    608: 20, 609: 20, 610: 20, 611: 20, 612: 1, 613: 7, 614: 12, 615: 16,
    616: 6, 618: 6, 619: 14, 620: 14, 621: 14, 622: 6, 623: 4, 624: 20,
    625: 21, 626: 19, 627: 19, 628: 19, 629: 1, 630: 8, 632: 18, 633: 13,
    634: 14, 635: 13, 637: 13, 638: 19, 640: 13, 641: 13, 642: 15, 643: 16,
    644: 16, 646: 16, 648: 19, 649: 6, 650: 4, 651: 18, 652: 1, 653: 7,
    654: 14, 655: 7, 656: 15, 657: 16, 658: 16, 659: 16, 660: 19, 661: 12,
    665: 21, 667: 20, 668: 12, 669: 12, 671: 14, 672: 20, 673: 20, 674: 12,
    675: 15, 676: 16, 677: 16, 678: 15, 679: 16, 680: 16,
    946: 21, 952: 19, 967: 12,
}


class PhoneEventError(ErrorKind):
    INVALID_PHONE_SET = ("Invalid phoneset for compiling phone event.", Severity.MUST_FIX)


class PhoneConverter(Protocol):
    """Converts a TTS phone id into UPS or SAPI phone codes."""

    def tts_to_ups(self, phone_id: int) -> Sequence[int]:
        ...

    def tts_to_sapi(self, phone_id: int) -> Sequence[int]:
        ...


class TablePhoneConverter:
    """
    PhoneConverter over explicit id tables.

    Example:
        converter = TablePhoneConverter(ups={1: [593]}, sapi={1: [4]})

    Raises KeyError for a phone id missing from a table.
    """

    def __init__(
        self,
        ups: Mapping[int, Sequence[int]],
        sapi: Mapping[int, Sequence[int]] | None = None,
    ):
        self.ups = dict(ups)
        self.sapi = dict(sapi or {})

    def tts_to_ups(self, phone_id: int) -> Sequence[int]:
        return self.ups[phone_id]

    def tts_to_sapi(self, phone_id: int) -> Sequence[int]:
        return self.sapi.get(phone_id, ())


def visemes_of(ups_codes: Sequence[int]) -> list[int]:
    """Non-silent visemes of a UPS phone sequence."""
    visemes = []
    for code in ups_codes:
        viseme = VISEME_MAP.get(code, SILENT_VISEME)
        if viseme != SILENT_VISEME:
            visemes.append(viseme)
    return visemes


def _convert(converter: PhoneConverter, method: str, phone_id: int, errors: ErrorSet) -> list[int]:
    try:
        return list(getattr(converter, method)(phone_id))
    except (LookupError, ValueError) as e:
        target = "UPS" if method == "tts_to_ups" else "SAPI"
        errors.add(
            DataCompilerError.COMPILING_LOG,
            f"Failed to convert TTS phone to {target}, Id={phone_id}. {e!r}",
        )
        return []


def compile_phone_event(
    phone_set: PhoneSet,
    converter: PhoneConverter | None = None,
) -> tuple[bytes, ErrorSet]:
    """Encode viseme and SAPI data for every phone of ``phone_set``.

    Raises:
        FieldOverflowError: If a phone converts to more than seven UPS or
            SAPI phones.
    """
    errors = ErrorSet()
    if phone_set.validate().contains(Severity.MUST_FIX):
        errors.add(PhoneEventError.INVALID_PHONE_SET)
        return b"", errors

    writer = BinaryWriter()
    for phone in phone_set.phones:
        writer.write_i16(phone.id)

        ups: list[int] = []
        sapi: list[int] = []
        if converter is not None:
            ups = _convert(converter, "tts_to_ups", phone.id, errors)
            sapi = _convert(converter, "tts_to_sapi", phone.id, errors)
        if len(ups) > MAX_UPS_PHONES_PER_TTS:
            raise FieldOverflowError(f"ups phones of {phone.name}", len(ups), "7 phones")
        if len(sapi) > MAX_SAPI_PHONES_PER_TTS:
            raise FieldOverflowError(f"sapi phones of {phone.name}", len(sapi), "7 phones")

        visemes = visemes_of(ups)
        for viseme in visemes + [0] * (MAX_UPS_PHONES_PER_TTS + 1 - len(visemes)):
            writer.write_u8(viseme)
        for code in sapi + [0] * (MAX_SAPI_PHONES_PER_TTS - len(sapi)):
            writer.write_u16(code)
        writer.write_u16(0)

    logger.debug("Encoded phone events for %d phones", len(phone_set.phones))
    return writer.getvalue(), errors
