"""
test_article_builder.py: Unit tests for article code synthesis.

Tests cover:
  - classify_template: cover / fitting / tray markers
  - build_article: trays, covers (angled and straight), fittings with and
    without an angle splice, blank base, dash normalisation, defaults
  - build_bend_article: archetype table and the 80° threshold
"""

import itertools
import pytest

from gerpaas.services.article_builder import (
    ArticleShape,
    build_article,
    build_bend_article,
    classify_template,
    normalize_article,
)


class TestClassifyTemplate:

    @pytest.mark.parametrize("base, shape", [
        ("GE-KT2-", ArticleShape.TRAY),
        ("GE-KTK1-", ArticleShape.COVER),
        ("GE-DK-", ArticleShape.COVER),
        ("GE-OBK-", ArticleShape.COVER),
        ("GE-IBK-", ArticleShape.COVER),
        ("GE-D-", ArticleShape.FITTING),
        ("GE-IB-", ArticleShape.FITTING),
        ("GE-OB-", ArticleShape.FITTING),
    ])
    def test_shapes(self, base, shape):
        """Cover markers win over fitting markers (GE-DK contains 'd')."""
        assert classify_template(base) == shape


class TestBuildTray:

    def test_reference_tray(self):
        """GE-KT2- 200x100, 1.2 mm, Sendzimir -> GE-KT2-20-A100-1,2-PG."""
        assert build_article("GE-KT2-", 200, 100, 1.2, "Сендзимір", None) == "GE-KT2-20-A100-1,2-PG"

    def test_base_without_trailing_dash(self):
        assert build_article("GE-KT2", 300, 50, 1.5, "Занурення", None) == "GE-KT2-30-A50-1,5-HDG"

    def test_angle_is_ignored_for_trays(self):
        assert build_article("GE-KT2-", 200, 100, 1.2, "Сендзимір", 45.0) == "GE-KT2-20-A100-1,2-PG"

    def test_non_positive_inputs_use_defaults(self):
        """W=0 -> 1 cm, H=0 -> A100, thickness 0 -> 1,0; no exception."""
        assert build_article("GE-KT2-", 0, 0, 0, "", None) == "GE-KT2-1-A100-1,0-PG"


class TestBuildCover:

    def test_reference_dk45_cover(self):
        """GE-DK- with 45° and hot-dip coating -> GE-DK45-20-1,2-HDG (no height segment)."""
        assert build_article("GE-DK-", 200, 0, 1.2, "занурення", 45.0) == "GE-DK45-20-1,2-HDG"

    def test_dk_rejects_90(self):
        """GE-DK accepts only 45°: a 90° cover keeps the plain base."""
        assert build_article("GE-DK-", 200, 0, 1.2, "Сендзимір", 90.0) == "GE-DK-20-1,2-PG"

    @pytest.mark.parametrize("base, angle, expected", [
        ("GE-OBK-", 45.0, "GE-OBK45-20-1,2-PG"),
        ("GE-OBK-", 90.0, "GE-OBK90-20-1,2-PG"),
        ("GE-IBK-", 89.6, "GE-IBK90-20-1,2-PG"),
        ("GE-IBK-", 30.0, "GE-IBK-20-1,2-PG"),
    ])
    def test_vertical_covers(self, base, angle, expected):
        assert build_article(base, 200, 100, 1.2, "Сендзимір", angle) == expected

    def test_cover_without_angle(self):
        assert build_article("GE-OBK-", 200, 100, 1.2, "Сендзимір", None) == "GE-OBK-20-1,2-PG"

    def test_straight_cover(self):
        assert build_article("GE-KTK1-", 200, 100, 1.2, "Сендзимір", None) == "GE-KTK1-20-1,2-PG"


class TestBuildFitting:

    def test_horizontal_bend_splices_any_angle(self):
        """-D accepts any rounded angle and keeps the template's dash: GE-D- at 30° -> GE-D-30-..."""
        assert build_article("GE-D-", 200, 100, 1.2, "Сендзимір", 30.0) == "GE-D-30-20-A100-1,2-PG"
        assert build_article("GE-D-", 200, 100, 1.2, "Сендзимір", 90.0) == "GE-D-90-20-A100-1,2-PG"

    def test_horizontal_bend_without_trailing_dash(self):
        assert build_article("GE-D", 200, 100, 1.2, "Сендзимір", 90.0) == "GE-D-90-20-A100-1,2-PG"

    def test_vertical_bend_drops_trailing_dash(self):
        assert build_article("GE-OB-", 200, 100, 1.2, "Сендзимір", 90.0) == "GE-OB90-20-A100-1,2-PG"

    def test_markers_are_case_sensitive(self):
        """A lower-case template is still a fitting but matches no angle marker."""
        assert build_article("ge-d-", 200, 100, 1.2, "Сендзимір", 90.0) == "ge-d-20-A100-1,2-PG"

    def test_vertical_bend_only_45_or_90(self):
        assert build_article("GE-IB-", 200, 100, 1.2, "Сендзимір", 45.0) == "GE-IB45-20-A100-1,2-PG"
        assert build_article("GE-OB-", 200, 100, 1.2, "Сендзимір", 60.0) == "GE-OB-20-A100-1,2-PG"

    def test_fitting_without_angle(self):
        assert build_article("GE-D-", 200, 100, 1.2, "Сендзимір", None) == "GE-D-20-A100-1,2-PG"

    def test_angle_rounds_half_to_even(self):
        """44.5 rounds to 44 (banker's rounding), so the -IB splice is skipped."""
        assert build_article("GE-IB-", 200, 100, 1.2, "Сендзимір", 44.5) == "GE-IB-20-A100-1,2-PG"


class TestBuildArticleGeneral:

    @pytest.mark.parametrize("base", ["", "   ", None])
    def test_blank_base_gives_empty(self, base):
        assert build_article(base, 200, 100, 1.2, "Сендзимір", None) == ""

    def test_deterministic(self):
        args = ("GE-D-", 200, 100, 1.2, "Сендзимір", 45.0)
        assert build_article(*args) == build_article(*args)

    def test_no_doubled_or_edge_dashes(self):
        """Every rule combination yields a code without '--' or leading/trailing '-'."""
        bases = ["GE-KT2", "GE-KT2--", "-GE-DK-", "GE-OBK", "GE-IB--", "GE-D"]
        angles = [None, 45.0, 90.0, 13.2]
        for base, angle, height in itertools.product(bases, angles, [0, 100]):
            article = build_article(base, 200, height, 1.2, "Сендзимір", angle)
            assert "--" not in article
            assert not article.startswith("-") and not article.endswith("-")

    def test_normalize_article(self):
        assert normalize_article("--GE--KT2---20-") == "GE-KT2-20"


class TestBuildBendArticle:

    @pytest.mark.parametrize("family, angle, expected", [
        ("470_DKC_S5_Horizontal Bend", 90.0, "GE-D90-20-A100-1,2-PG"),
        ("470_DKC_S5_Horizontal Bend", 45.0, "GE-D45-20-A100-1,2-PG"),
        ("470_DKC_S5_Int Vertical Bend_1-89", 80.0, "GE-IB90-20-A100-1,2-PG"),
        ("470_DKC_S5_Ext Vertical Bend_1-89", 79.9, "GE-OB45-20-A100-1,2-PG"),
        ("470_DKC_S5_Horizontal Bend Cover", 90.0, "GE-DK-20-1,2-PG"),
        ("470_DKC_S5_Horizontal Bend Cover", 45.0, "GE-DK45-20-1,2-PG"),
        ("470_DKC_S5_Int Vertical Bend Cover", 90.0, "GE-IBK90-20-1,2-PG"),
        ("470_DKC_S5_Ext Vertical Bend Cover", 30.0, "GE-OBK45-20-1,2-PG"),
    ])
    def test_archetypes(self, family, angle, expected):
        """>= 80° picks the 90° prefix; covers carry no height segment."""
        assert build_bend_article(family, 200, 100, 1.2, "Сендзимір", angle) == expected

    def test_missing_angle_picks_large_variant(self):
        assert build_bend_article("Int Vertical Bend", 200, 100, 1.2, "", None) == "GE-IB90-20-A100-1,2-PG"

    def test_unknown_family(self):
        assert build_bend_article("S5_Sheet_Perforated tray", 200, 100, 1.2, "", 90.0) == ""
