"""
Text rendering shared by node labels, tooltips and per-peptide detail lines.

Sequence annotation:
    Modifications are written inline in brackets or parentheses, e.g.
    ``ELVIS[+79.966]LIVES``. Every character of a modification span is
    emphasized with ``<b>..</b>``. When site highlighting is active, bare
    residues at the requested 1-based positions are emphasized too; bracket
    characters and modification contents never count as residue positions.

Number formatting:
    Labels use one decimal (``Infinity``/``-Infinity``/``N/A``), details use
    three decimals (``INF``/``-INF``/``N/A``). Rounding is half-even on the
    exact binary value of the float (0.15 is stored just below the midpoint
    and renders as 0.1); trailing zeros are dropped.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_EVEN, Decimal, localcontext
from typing import Iterable, Optional, Union

from pcqnet.model.nodes import PositionInPeptide
from pcqnet.model.ratio import parse_float

__all__ = [
    'annotate_sequence',
    'to_html',
    'format_number',
    'format_number_more_decimals',
]

_OPEN = "(["
_CLOSE = ")]"

Position = Union[int, PositionInPeptide]

_DECIMAL_PRECISION = 400


def _position_numbers(positions: Optional[Iterable[Position]]) -> set:
    numbers = set()
    for position in positions or ():
        if isinstance(position, PositionInPeptide):
            numbers.add(position.position)
        else:
            numbers.add(int(position))
    return numbers


def annotate_sequence(
    full_sequence: str,
    positions: Optional[Iterable[Position]] = None,
    highlight_positions: bool = False,
) -> str:
    """
    Mark up a peptide sequence for display.

    Parameters:
        full_sequence: Sequence with inline modifications
        positions: 1-based residue positions to emphasize
        highlight_positions: Whether site/PTM collapsing is active; positions
            are ignored otherwise

    Returns:
        The sequence with ``<b>`` tags around modifications and highlighted
        residues. A sequence without brackets or positions is returned as is.

    Example:
        >>> annotate_sequence("PEP[+80]TIDE")
        'PEP<b>[+80]</b>TIDE'
        >>> annotate_sequence("PEPTIDE", [3], highlight_positions=True)
        'PE<b>P</b>TIDE'
    """
    wanted = _position_numbers(positions) if highlight_positions else set()

    parts = []
    residue_position = 0
    in_modification = False
    for char in full_sequence:
        if char in _OPEN:
            in_modification = True
            parts.append("<b>" + char)
            continue
        if char in _CLOSE:
            in_modification = False
            parts.append(char + "</b>")
            continue
        if not in_modification:
            residue_position += 1
            if residue_position in wanted:
                parts.append("<b>" + char + "</b>")
                continue
        parts.append(char)
    return "".join(parts)


def to_html(text: str) -> str:
    """Wrap tooltip text as HTML, turning newlines into ``<br>``."""
    return "<html>" + text.replace("\n", "<br>") + "</html>"


def _format_decimal(number: float, places: str) -> str:
    # exact binary value; precision wide enough for the float max sentinels
    with localcontext() as ctx:
        ctx.prec = _DECIMAL_PRECISION
        quantized = Decimal(float(number)).quantize(Decimal(places), rounding=ROUND_HALF_EVEN)
    text = format(quantized, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        text = "0"
    return text


def format_number(number: Optional[float]) -> Optional[str]:
    """One-decimal rendering used for peptide labels."""
    if number is None:
        return None
    if math.isnan(number):
        return "N/A"
    if math.isinf(number):
        return "Infinity" if number > 0 else "-Infinity"
    return _format_decimal(number, "0.1")


def format_number_more_decimals(number: Union[float, str, None]) -> Optional[str]:
    """
    Three-decimal rendering used in tooltips.

    Text input is parsed first; unparseable text gives None.
    """
    if isinstance(number, str):
        number = parse_float(number)
    if number is None:
        return None
    if math.isnan(number):
        return "N/A"
    if math.isinf(number):
        return "INF" if number > 0 else "-INF"
    return _format_decimal(number, "0.001")
