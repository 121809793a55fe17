"""
Byte transcoding for byte-level BPE.

The merge step works on characters, but merge ranks are defined over raw
bytes. These helpers expand a byte string so that every byte becomes exactly
one character, and map those characters back to their byte (scalar) values.
"""

from typing import Mapping, Union


# Lead unit ranges for the legacy multi-unit encoding forms, as
# (first lead, last lead, total units in the sequence).
_LEAD_RANGES = (
    (0x00, 0x7F, 1),
    (0xC0, 0xDF, 2),
    (0xE0, 0xEF, 3),
    (0xF0, 0xF7, 4),
    (0xF8, 0xFB, 5),
    (0xFC, 0xFD, 6),
)


def encode_bytes(data: bytes) -> str:
    """
    Expand a byte string into one character per byte.

    Bytes 0x00-0x7F map to the identical code point, bytes 0x80-0xFF map to
    the Latin-1 supplement code point of the same value.

    Args:
        data: Raw bytes

    Returns:
        String with len(result) == len(data)
    """
    return bytes(data).decode("latin-1")


def decode_scalar(unit: Union[str, bytes]) -> int:
    """
    Decode the scalar value of a single encoded character.

    A ``str`` argument is taken in its UTF-8 form. Sequences of 1 to 6 units
    are accepted (including the obsolete 5 and 6 unit forms). A lead unit
    that cannot start a sequence decodes to 0.

    Args:
        unit: One character, or the encoded units of one character

    Returns:
        Integer scalar value
    """
    if isinstance(unit, str):
        units = unit.encode("utf-8", errors="surrogatepass")
    else:
        units = bytes(unit)

    if not units:
        raise ValueError("Cannot decode a scalar from an empty sequence")

    lead = units[0]
    for first, last, length in _LEAD_RANGES:
        if first <= lead <= last:
            break
    else:
        return 0

    if len(units) < length:
        raise ValueError(
            f"Truncated sequence: lead unit 0x{lead:02X} needs {length} units, got {len(units)}"
        )

    if length == 1:
        return lead

    value = lead - first
    for continuation in units[1:length]:
        value = value * 64 + (continuation - 0x80)
    return value


def transcode(segment: str, byte_to_char: Mapping[int, str]) -> str:
    """
    Convert a pre-segment into the byte-level alphabet.

    Every UTF-8 byte of the segment becomes exactly one alphabet character.
    """
    expanded = encode_bytes(segment.encode("utf-8"))
    return "".join(byte_to_char[decode_scalar(ch)] for ch in expanded)
