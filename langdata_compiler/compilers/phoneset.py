"""
Phone Set Compiler - Phone inventory as fixed PhoneData records.

Layout:
    u32 record_size (52)
    u32 count
    count x PhoneData {u16 id, text[20] name (upper case), u32 duration (0), u32 feature}

Records keep the phone-table order.
"""

from __future__ import annotations

from langdata_compiler.binary import PHONE_DATA, BinaryWriter
from langdata_compiler.errors import ErrorSet, Severity
from langdata_compiler.rawdata.models import PhoneSet


def compile_phone_set(phone_set: PhoneSet) -> tuple[bytes, ErrorSet]:
    """Validate and encode a phone set.

    Returns:
        ``(data, errors)``; data is empty when validation found MUST_FIX errors.
    """
    errors = phone_set.validate()
    if errors.contains(Severity.MUST_FIX):
        return b"", errors

    writer = BinaryWriter()
    writer.write_u32(PHONE_DATA.size)
    writer.write_u32(len(phone_set.phones))
    for phone in phone_set.phones:
        writer.write_bytes(PHONE_DATA.pack(
            id=phone.id,
            name=phone.name.upper(),
            duration=0,
            feature=phone.runtime_feature,
        ))
    return writer.getvalue(), errors
