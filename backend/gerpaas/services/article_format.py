"""
Article format helpers: the single place where article tokens are rendered.

Every helper is pure: out-of-range input is replaced by a documented default
and logged as a warning, never raised. Only the free-text number parsers
raise, with a typed ArticleFormatError.
"""
import logging
import math
from decimal import Decimal, ROUND_HALF_UP

logger = logging.getLogger("gerpaas-format")

DEFAULT_COATING_CODE = "PG"

# Checked in order; first substring hit wins
COATING_CODES = [
    ("сендз", "PG"),    # Sendzimir
    ("занур", "HDG"),   # hot-dip
    ("цинк", "HDG"),
    ("алюм", "AL"),
]

_UNIT_SUFFIXES = ("мм", "mm")


class ArticleFormatError(ValueError):
    """Raised when free text cannot be read as a number."""


class EmptyValueError(ArticleFormatError):
    def __init__(self, what: str = "value"):
        super().__init__(f"Empty {what}")


class InvalidNumberError(ArticleFormatError):
    def __init__(self, raw: str, what: str = "number"):
        self.raw = raw
        super().__init__(f"Invalid {what}: '{raw}'")


# ── Coating ──────────────────────────────────────────────────────────────────

def coating_code(name: str) -> str:
    """Map a coating name (any case) to PG / HDG / AL."""
    if not name or not name.strip():
        logger.warning("Empty coating, using '%s'", DEFAULT_COATING_CODE)
        return DEFAULT_COATING_CODE

    low = name.strip().lower()
    for marker, code in COATING_CODES:
        if marker in low:
            return code

    logger.warning("Unknown coating '%s', using '%s'", name, DEFAULT_COATING_CODE)
    return DEFAULT_COATING_CODE


# ── Thickness ────────────────────────────────────────────────────────────────

def thickness_text(mm: float) -> str:
    """1.2 -> '1,2'. Always one decimal with a comma separator."""
    if mm is None or mm <= 0:
        logger.warning("Invalid thickness '%s', using 1,0 mm", mm)
        mm = 1.0
    value = Decimal(str(mm)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return f"{value:.1f}".replace(".", ",")


# ── Width mm -> cm ───────────────────────────────────────────────────────────

def width_cm(mm: int) -> int:
    if mm <= 0:
        logger.warning("Invalid width '%s' mm, using 1 cm", mm)
        return 1
    return mm // 10


# ── Height -> 'A{H}' ─────────────────────────────────────────────────────────

def height_token(mm: int) -> str:
    if mm <= 0:
        logger.warning("Invalid height '%s' mm, using A100", mm)
        mm = 100
    return f"A{mm}"


# ── Free-text numbers ────────────────────────────────────────────────────────

def _normalize_number_text(raw: str) -> str:
    text = raw.lower()
    for suffix in _UNIT_SUFFIXES:
        text = text.replace(suffix, "")
    return "".join(text.split()).replace(",", ".")


def parse_float(raw) -> float:
    """
    Read a float from host text such as '1,2 мм' or ' 45.0 '.

    Raises:
        EmptyValueError: raw is None or blank.
        InvalidNumberError: nothing numeric is left after normalization.
    """
    if raw is None or not str(raw).strip():
        raise EmptyValueError()
    text = _normalize_number_text(str(raw))
    try:
        value = float(text)
    except ValueError:
        raise InvalidNumberError(text)
    if not math.isfinite(value):
        raise InvalidNumberError(text)
    return value


def parse_int(raw) -> int:
    """
    Read an integer from host text such as '100 мм' or '99,6'.

    Integers parse directly; decimals are rounded half-to-even.

    Raises:
        EmptyValueError: raw is None or blank.
        InvalidNumberError: the text is not numeric.
    """
    if raw is None or not str(raw).strip():
        raise EmptyValueError()
    text = _normalize_number_text(str(raw))
    try:
        return int(text)
    except ValueError:
        pass
    try:
        value = float(text)
    except ValueError:
        raise InvalidNumberError(text, what="integer")
    if not math.isfinite(value):
        raise InvalidNumberError(text, what="integer")
    return int(round(value))
