"""
Dimension & angle extraction for cable-tray elements.

Width/height come from the two DKC size parameters when both are set,
otherwise from the combined "Размер" text ("200 ммx100 мм", "200/100-200/100",
"200x100"). The angle comes from DKC_Angle, stored either as radians or as
display text ("45,00°").

Nothing here raises on missing or malformed data: sizes degrade to 0 and the
angle to None, which callers must keep distinct from 0°.
"""
import logging
import math
import re
from typing import List, NamedTuple, Optional, Tuple

from gerpaas.config import PARAM_ANGLE, PARAM_HEIGHT, PARAM_SIZE, PARAM_WIDTH
from gerpaas.services.article_format import ArticleFormatError, parse_float

logger = logging.getLogger("gerpaas-dimensions")

# Separators between W and H inside one size pair
_PAIR_SEPARATORS = ("×", "х", "Х", "X", "/")
# Separators between size pairs (fittings list inlet/outlet sizes)
_SEGMENT_SPLIT = re.compile(r"[-–—]")


class ElementDimensions(NamedTuple):
    width: int
    height: int
    angle: Optional[float]


def _size_param_mm(element, name: str) -> int:
    """Read a size parameter in mm; anything unreadable counts as 0."""
    raw = element.lookup(name)
    if raw is None or isinstance(raw, bool):
        return 0
    if isinstance(raw, (int, float)):
        return int(round(raw)) if math.isfinite(raw) else 0
    try:
        return int(round(parse_float(raw)))
    except ArticleFormatError:
        return 0


def parse_size_pairs(raw: Optional[str]) -> List[Tuple[int, int]]:
    """
    Parse every W×H pair in a host size string.

    >>> parse_size_pairs("200/100-200/100")
    [(200, 100), (200, 100)]
    """
    pairs: List[Tuple[int, int]] = []
    if not raw or not raw.strip():
        return pairs

    for segment in _SEGMENT_SPLIT.split(raw):
        text = "".join(segment.split()).replace("мм", "")
        for sep in _PAIR_SEPARATORS:
            text = text.replace(sep, "x")
        parts = text.split("x")
        if len(parts) < 2:
            continue
        try:
            pairs.append((int(parts[0]), int(parts[1])))
        except ValueError:
            continue
    return pairs


def get_angle_deg(element) -> Optional[float]:
    """DKC_Angle in degrees, or None when it cannot be determined."""
    raw = element.lookup(PARAM_ANGLE)
    if raw is None:
        return None

    # Numeric storage is radians
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        if 0 < raw < 2 * math.pi:
            return math.degrees(raw)

    text = str(raw).replace("°", "").replace(",", ".").strip()
    if text:
        try:
            value = float(text)
            if math.isfinite(value):
                return value
        except ValueError:
            pass

    logger.warning(
        "Could not determine angle from '%s'",
        raw,
        extra={"element_id": getattr(element, "element_id", None)},
    )
    return None


def get_width_height_and_angle(element) -> ElementDimensions:
    """Width and height in mm plus the angle in degrees (or None)."""
    if element is None:
        return ElementDimensions(0, 0, None)

    width = _size_param_mm(element, PARAM_WIDTH)
    height = _size_param_mm(element, PARAM_HEIGHT)

    if width <= 0 or height <= 0:
        size_text = element.lookup(PARAM_SIZE)
        pairs = parse_size_pairs(size_text if isinstance(size_text, str) else None)
        if pairs:
            width, height = pairs[0]
        else:
            width, height = 0, 0

    return ElementDimensions(width, height, get_angle_deg(element))
