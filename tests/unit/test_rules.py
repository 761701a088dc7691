"""Tests for the classifier rule tables and matching."""

import pytest

from listing_images.classification.filename import analysis_name, clean_filename
from listing_images.classification.rules import (
    CATEGORY_RULES,
    GARMENT,
    HOME_APPLIANCES,
    RuleCategory,
    compile_pattern,
    match_category,
    match_rules,
)


class TestCleanFilename:
    """Tests for clean_filename."""

    @pytest.mark.parametrize(
        "filename, expected",
        [
            ("IMG_2024_red-silk-dress (1).JPG", "red silk dress"),
            ("#01_coffee-maker_grinder_front.png", "coffee maker grinder front"),
            ("DSC_0042.jpg", ""),
            ("Screenshot 2024-05-01 blue_jeans.png", "blue jeans"),
            ("copy of leather-bag [final].webp", "leather bag"),
            ("wechat_image_black boots_20240501.jpeg", "black boots"),
            ("summer dress.heic", "summer dress"),
            ("Photo-Frame-Walnut.jpg", "frame walnut"),
            ("images_of_shoes.jpg", "images of shoes"),
        ],
    )
    def test_examples(self, filename, expected):
        assert clean_filename(filename) == expected

    def test_analysis_name_falls_back_to_raw_name(self):
        assert analysis_name("IMG_1234.jpg") == "img_1234.jpg"
        assert analysis_name("red-dress.jpg") == "red dress"


class TestPatternMatching:
    """Tests for compile_pattern semantics."""

    @pytest.mark.parametrize(
        "pattern, text",
        [
            ("dress", "red dress"),
            ("dress", "red dresses"),
            ("jean", "blue jeans"),
            ("coffee-maker", "coffee maker"),
            ("coffee-maker", "coffeemaker"),
            ("coffee-maker", "coffee_maker"),
            ("连衣裙", "夏季连衣裙新款"),
            ("t恤", "白色t恤"),
        ],
    )
    def test_matches(self, pattern, text):
        assert compile_pattern(pattern).search(text)

    @pytest.mark.parametrize(
        "pattern, text",
        [
            ("tan", "tank top"),
            ("top", "laptop stand"),
            ("ring", "earring"),
            ("cap", "capsule"),
            ("ash", "washer"),
        ],
    )
    def test_latin_patterns_need_word_boundaries(self, pattern, text):
        assert not compile_pattern(pattern).search(text)


class TestCategoryMatching:
    """Tests for match_category and match_rules."""

    def test_first_entry_wins(self):
        category = RuleCategory("c", (("a", ("x",)), ("b", ("x",))))
        assert match_category("x", category) == ["a"]

    def test_collect_all(self):
        category = RuleCategory("c", (("a", ("x",)), ("b", ("y",))), collect_all=True)
        assert match_category("x y", category) == ["a", "b"]

    def test_home_appliances_collects_every_match(self):
        assert match_category("coffee maker grinder front", HOME_APPLIANCES) == [
            "coffee-maker",
            "coffee-grinder",
        ]

    def test_home_appliances_chinese(self):
        assert match_category("咖啡机研磨机正面白底图", HOME_APPLIANCES) == [
            "coffee-maker",
            "coffee-grinder",
        ]

    def test_garment_prefers_longer_pattern(self):
        # "top" (shirt) appears before "maxi-dress" would be reached in entry order
        assert match_category("maxi dress top view", GARMENT) == ["dress"]
        assert match_category("denim jacket", GARMENT) == ["jacket"]

    def test_garment_single_token(self):
        assert match_category("white shirt", GARMENT) == ["shirt"]

    def test_match_rules_category_order(self):
        assert match_rules("red silk dress") == ["red", "silk", "dress"]

    def test_no_matches(self):
        assert match_rules("zzz qqq") == []

    def test_table_covers_all_categories(self):
        assert [c.category_id for c in CATEGORY_RULES] == [
            "color",
            "material",
            "style",
            "garment",
            "footwear",
            "bags",
            "jewelry",
            "accessories",
            "electronics",
            "home-appliances",
            "furniture",
            "kitchenware",
            "beauty",
            "sports",
            "baby",
            "pet",
            "scene",
            "season",
            "size",
        ]

    def test_only_expected_flags(self):
        assert [c.category_id for c in CATEGORY_RULES if c.collect_all] == ["home-appliances"]
        assert [c.category_id for c in CATEGORY_RULES if c.specific_first] == ["garment"]


class TestWordBoundaries:
    """Latin patterns match whole words only; run-together names match nothing."""

    @pytest.mark.parametrize("name", ["reddress", "bluejeans", "tank top"])
    def test_run_together_words_do_not_match(self, name):
        tokens = match_rules(name)
        assert "red" not in tokens
        assert "blue" not in tokens
        assert "brown" not in tokens

    def test_run_together_name_falls_back_to_product(self):
        assert match_rules("reddress") == []

    @pytest.mark.parametrize("name", ["red dress", "red_dress", "red-dress"])
    def test_separated_words_match(self, name):
        assert match_rules(name) == ["red", "dress"]

    def test_cjk_matches_inside_runs(self):
        assert "red" in match_rules("新款红色连衣裙")
