"""
Article Code Builder: synthesizes GERPAAS article codes from a base template.

Grammar (all tokens from article_format):
    Tray:     {base}-{widthCm}-A{height}-{thk}-{coating}        GE-KT2-20-A100-1,2-PG
    Cover:    {base}[{angle}]-{widthCm}-{thk}-{coating}         GE-DK45-20-1,2-HDG
    Fitting:  {base}[{angle}]-{widthCm}-A{height}-{thk}-{coating}  GE-IB90-20-A100-1,2-PG

The base template is classified once (ArticleShape) and handed to the builder
registered for that shape. Templates that match no angle rule fall back to the
plain "base + suffix" form; that is not an error.

A second, table-driven builder covers the six bend archetypes whose mapping
rows carry no base article: the prefix is chosen from the family name and the
angle alone (>= 80° -> the 90° variant).
"""
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, FrozenSet, List, Optional, Tuple

from gerpaas.services.article_format import coating_code, height_token, thickness_text, width_cm

logger = logging.getLogger("gerpaas-article")

_DASH_RUN = re.compile(r"-{2,}")


class ArticleShape(str, Enum):
    TRAY = "tray"
    COVER = "cover"
    FITTING = "fitting"


# Lower-case substrings matched against the base template
COVER_MARKERS = ("ktk", "bk", "k1")
FITTING_MARKERS = ("d", "ib", "ob")

# Angled covers: template (without trailing dash) -> angles that get spliced in
ANGLED_COVER_PREFIXES: Dict[str, FrozenSet[int]] = {
    "GE-DK": frozenset({45}),
    "GE-OBK": frozenset({45, 90}),
    "GE-IBK": frozenset({45, 90}),
}

# Fitting markers, checked in order against the template as written: (marker,
# accepted angles or None for any, whether the trailing dash is dropped).
# Horizontal bends keep it: GE-D- at 90° -> GE-D-90-...
FITTING_ANGLE_MARKERS: List[Tuple[str, Optional[FrozenSet[int]], bool]] = [
    ("-D", None, False),                      # horizontal bends
    ("-IB", frozenset({45, 90}), True),       # inner vertical
    ("-OB", frozenset({45, 90}), True),       # outer vertical
]


@dataclass(frozen=True)
class ArticleTokens:
    width: str
    thickness: str
    coating: str
    height_mm: int

    @property
    def height(self) -> str:
        # Rendered on demand: covers have no height segment and must not warn on H=0
        return height_token(self.height_mm)


def classify_template(base_article: str) -> ArticleShape:
    low = base_article.strip().lower()
    if any(m in low for m in COVER_MARKERS) or low.endswith("k-"):
        return ArticleShape.COVER
    if any(m in low for m in FITTING_MARKERS):
        return ArticleShape.FITTING
    return ArticleShape.TRAY


def normalize_article(article: str) -> str:
    """Collapse repeated dashes and trim them from both ends."""
    return _DASH_RUN.sub("-", article).strip("-")


def _rounded(angle: Optional[float]) -> Optional[int]:
    # round() is half-to-even: 44.5 -> 44, 45.5 -> 46
    return None if angle is None else int(round(angle))


# ── Per-shape builders ───────────────────────────────────────────────────────

def _build_tray(base: str, tokens: ArticleTokens, angle: Optional[float]) -> str:
    return f"{base}-{tokens.width}-{tokens.height}-{tokens.thickness}-{tokens.coating}"


def _build_cover(base: str, tokens: ArticleTokens, angle: Optional[float]) -> str:
    stem = base.rstrip("-")
    accepted = ANGLED_COVER_PREFIXES.get(stem.upper())
    ang = _rounded(angle)
    if accepted is not None and ang in accepted:
        return f"{stem}{ang}-{tokens.width}-{tokens.thickness}-{tokens.coating}"
    return f"{base}-{tokens.width}-{tokens.thickness}-{tokens.coating}"


def _build_fitting(base: str, tokens: ArticleTokens, angle: Optional[float]) -> str:
    ang = _rounded(angle)
    if ang is not None:
        for marker, accepted, trim in FITTING_ANGLE_MARKERS:
            if marker not in base:
                continue
            if accepted is None or ang in accepted:
                stem = base.rstrip("-") if trim else base
                return f"{stem}{ang}-{tokens.width}-{tokens.height}-{tokens.thickness}-{tokens.coating}"
            break
    return f"{base}-{tokens.width}-{tokens.height}-{tokens.thickness}-{tokens.coating}"


_BUILDERS: Dict[ArticleShape, Callable[[str, ArticleTokens, Optional[float]], str]] = {
    ArticleShape.TRAY: _build_tray,
    ArticleShape.COVER: _build_cover,
    ArticleShape.FITTING: _build_fitting,
}


def build_article(
    base_article: str,
    width: int,
    height: int,
    thickness_mm: float,
    coating: str,
    angle: Optional[float] = None,
) -> str:
    """
    Build the final article code for a mapped family.

    Args:
        base_article: template from the mapping table, e.g. "GE-KT2-"
        width, height: element size in mm (non-positive values get defaults)
        thickness_mm: selected sheet thickness
        coating: selected coating name, e.g. "Сендзимір"
        angle: bend angle in degrees, None when the element has none

    Returns:
        The article code, or "" when base_article is blank.
    """
    if not base_article or not base_article.strip():
        return ""

    base = base_article.strip()
    shape = classify_template(base)
    tokens = ArticleTokens(
        width=str(width_cm(width)),
        thickness=thickness_text(thickness_mm),
        coating=coating_code(coating),
        height_mm=height,
    )
    # Every builder appends "-<suffix>" to a base that ends in exactly one dash
    working = base.rstrip("-") + "-"
    article = normalize_article(_BUILDERS[shape](working, tokens, angle))
    logger.debug("%s %s -> %s", shape.value, base, article)
    return article


# ── Bend companion builder ───────────────────────────────────────────────────

BEND_ANGLE_THRESHOLD = 80.0


@dataclass(frozen=True)
class BendArchetype:
    family_marker: str
    prefix_large: str      # angle >= 80° (or unknown)
    prefix_small: str      # angle < 80°
    is_cover: bool


# Covers first: "Horizontal Bend Cover" also contains "Horizontal Bend"
BEND_ARCHETYPES: Tuple[BendArchetype, ...] = (
    BendArchetype("Horizontal Bend Cover", "GE-DK-", "GE-DK45-", True),
    BendArchetype("Int Vertical Bend Cover", "GE-IBK90-", "GE-IBK45-", True),
    BendArchetype("Ext Vertical Bend Cover", "GE-OBK90-", "GE-OBK45-", True),
    BendArchetype("Horizontal Bend", "GE-D90-", "GE-D45-", False),
    BendArchetype("Int Vertical Bend", "GE-IB90-", "GE-IB45-", False),
    BendArchetype("Ext Vertical Bend", "GE-OB90-", "GE-OB45-", False),
)


def find_bend_archetype(family_name: str) -> Optional[BendArchetype]:
    low = (family_name or "").lower()
    for archetype in BEND_ARCHETYPES:
        if archetype.family_marker.lower() in low:
            return archetype
    return None


def build_bend_article(
    family_name: str,
    width: int,
    height: int,
    thickness_mm: float,
    coating: str,
    angle: Optional[float] = None,
) -> str:
    """Article for a bend family by name; "" when the family is not a known bend."""
    archetype = find_bend_archetype(family_name)
    if archetype is None:
        return ""

    large = angle is None or angle >= BEND_ANGLE_THRESHOLD
    prefix = archetype.prefix_large if large else archetype.prefix_small
    parts = [prefix, str(width_cm(width))]
    if not archetype.is_cover:
        parts.append(height_token(height))
    parts += [thickness_text(thickness_mm), coating_code(coating)]
    return normalize_article("-".join(parts))
