"""
Shared formatting utilities for the console report.

Sizes are printed in compact IEC form (``1.5G``, ``512K``, ``12B``), the
shape ``du -h`` and ``numfmt --to=iec`` produce.
"""

from typing import Optional

BYTES_PER_KIB = 1024
BYTES_PER_MIB = 1024**2
BYTES_PER_GIB = 1024**3
BYTES_PER_TIB = 1024**4

IEC_UNITS = ["B", "K", "M", "G", "T", "P"]
# Values at or above this are shown without a decimal.
_DECIMAL_CUTOFF = 10


def format_size(num_bytes: Optional[int]) -> str:
    """
    Format a byte count as a compact IEC string.

    Examples:
        >>> format_size(512)
        '512B'
        >>> format_size(1536)
        '1.5K'
        >>> format_size(20 * 1024**3)
        '20G'
        >>> format_size(None)
        '?'
    """
    if num_bytes is None:
        return "?"

    value = float(num_bytes)
    for unit in IEC_UNITS:
        if unit == "B":
            if value < BYTES_PER_KIB:
                return f"{int(value)}B"
        else:
            decimals = 1 if value < _DECIMAL_CUTOFF else 0
            # Choose the unit from the rounded value.
            rounded = round(value, decimals)
            if rounded < BYTES_PER_KIB or unit == IEC_UNITS[-1]:
                return f"{rounded:.{decimals}f}{unit}"
        value /= BYTES_PER_KIB

    return f"{value:.0f}P"
