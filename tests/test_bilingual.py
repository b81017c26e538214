"""
双语对照合并测试
"""

from foundry_tools.core.bilingual import merge_bilingual


class TestMergeBilingual:

    def test_short_text_is_bilingual(self):
        assert merge_bilingual({"name": "长剑"}, {"name": "Longsword"}) == {"name": "长剑 Longsword"}

    def test_long_text_translation_only(self):
        original = "A" * 60 + " long description of the item"
        merged = merge_bilingual({"desc": "很长的描述"}, {"desc": original})
        assert merged == {"desc": "很长的描述"}

    def test_threshold_boundary(self):
        at = "x" * 50
        below = "x" * 49
        assert merge_bilingual("译", at) == "译"
        assert merge_bilingual("译", below) == "译 " + below
        assert merge_bilingual("译", at, threshold=51) == "译 " + at

    def test_unchanged_text_not_duplicated(self):
        assert merge_bilingual({"name": "Longsword"}, {"name": "Longsword"}) == {"name": "Longsword"}

    def test_missing_original_key(self):
        assert merge_bilingual({"a": "新", "b": "二"}, {"a": "New"}) == {"a": "新 New", "b": "二"}

    def test_null_original_value(self):
        assert merge_bilingual({"a": "新"}, {"a": None}) == {"a": "新"}

    def test_nested_and_arrays(self):
        translated = {"pages": [{"name": "简介"}, {"name": "规则"}], "meta": {"title": "书"}}
        original = {"pages": [{"name": "Intro"}], "meta": {"title": "Book"}}
        assert merge_bilingual(translated, original) == {
            "pages": [{"name": "简介 Intro"}, {"name": "规则"}],
            "meta": {"title": "书 Book"},
        }

    def test_non_strings_pass_through(self):
        translated = {"n": 3, "flag": True, "none": None}
        assert merge_bilingual(translated, {"n": 4, "flag": False}) == translated

    def test_type_mismatch_uses_translation(self):
        assert merge_bilingual({"a": {"b": "乙"}}, {"a": "flat"}) == {"a": {"b": "乙"}}
        assert merge_bilingual(["甲"], {"0": "A"}) == ["甲"]

    def test_inputs_not_mutated(self):
        translated = {"a": {"b": "乙"}}
        original = {"a": {"b": "B"}}
        merged = merge_bilingual(translated, original)
        assert merged == {"a": {"b": "乙 B"}}
        assert translated == {"a": {"b": "乙"}}
        assert original == {"a": {"b": "B"}}
        assert merged["a"] is not translated["a"]

    def test_extra_original_keys_ignored(self):
        assert merge_bilingual({"a": "甲"}, {"a": "A", "z": "Z"}) == {"a": "甲 A"}


def test_doc_example_and_small_threshold():
    assert merge_bilingual({"a": "译文"}, {"a": "Text"}, 50) == {"a": "译文 Text"}
    assert merge_bilingual({"a": "译文"}, {"a": "Text"}, 3) == {"a": "译文"}
