"""
Tests for applying single rules to filenames
"""

from datetime import datetime

import pytest

from core.rule_engine import NameParts, apply_rule, apply_rules, format_date
from core.rules import (
    RULE_TYPES,
    CaseMode,
    CaseRule,
    ChangeExtRule,
    DateRenameRule,
    DateSource,
    FilterExtRule,
    InsertAtRule,
    Placement,
    PrefixRule,
    RegexRule,
    RemoveAtRule,
    RemoveCharsRule,
    RemoveSpecialRule,
    ReplaceRule,
    SequentialRule,
    SuffixRule,
    TrimMode,
    TrimSpacesRule,
    new_rule,
)


def applied(base, rule, ext=".jpg", index=0, **kwargs):
    return apply_rule(NameParts(base=base, ext=ext, **kwargs), rule, index).name


class TestTextRules:

    def test_prefix_suffix(self):
        assert applied("photo", PrefixRule(value="x_")) == "x_photo.jpg"
        assert applied("photo", SuffixRule(value="_y")) == "photo_y.jpg"
        assert applied("photo", PrefixRule()) == "photo.jpg"

    def test_replace_defaults_to_case_insensitive(self):
        assert applied("Photo photo", ReplaceRule(find="photo", replace="img")) == "img img.jpg"

    def test_replace_case_sensitive(self):
        rule = ReplaceRule(find="photo", replace="img", case_sensitive=True)
        assert applied("Photo photo", rule) == "Photo img.jpg"

    def test_replace_leaves_extension(self):
        assert applied("jpg", ReplaceRule(find="jpg", replace="png")) == "png.jpg"

    def test_replace_with_regex(self):
        rule = ReplaceRule(find=r"\d+", replace="#", use_regex=True)
        assert applied("a1b22", rule) == "a#b#.jpg"

    def test_remove_chars(self):
        assert applied("a-b_c", RemoveCharsRule(chars="-_")) == "abc.jpg"

    def test_insert_at(self):
        assert applied("photo", InsertAtRule(value="XX", position=2)) == "phXXoto.jpg"
        assert applied("photo", InsertAtRule(value="XX", position=100)) == "photoXX.jpg"
        assert applied("photo", InsertAtRule(value="XX", position=-2)) == "phoXXto.jpg"
        assert applied("photo", InsertAtRule(value="XX", position=-100)) == "XXphoto.jpg"

    def test_remove_at(self):
        assert applied("photo", RemoveAtRule(start=1, count=2)) == "pto.jpg"
        assert applied("photo", RemoveAtRule(start=-2, count=1)) == "phoo.jpg"
        assert applied("photo", RemoveAtRule(start=10, count=3)) == "photo.jpg"
        assert applied("photo", RemoveAtRule(start=0, count=0)) == "photo.jpg"
        assert applied("photo", RemoveAtRule(start=0, count=-4)) == "photo.jpg"

    def test_remove_special(self):
        assert applied("a&b (1)", RemoveSpecialRule()) == "ab 1.jpg"


class TestCaseRule:

    @pytest.mark.parametrize("mode, expected", [
        (CaseMode.UPPER, "MY PHOTO"),
        (CaseMode.LOWER, "my photo"),
        (CaseMode.TITLE, "My Photo"),
        (CaseMode.CAMEL, "myPhoto"),
        (CaseMode.SNAKE, "my_photo"),
        (CaseMode.KEBAB, "my-photo"),
    ])
    def test_modes(self, mode, expected):
        assert applied("my PHOTO", CaseRule(mode=mode)) == expected + ".jpg"

    def test_extension_untouched(self):
        assert applied("abc", CaseRule(mode=CaseMode.UPPER), ext=".jpg") == "ABC.jpg"
        assert applied("ABC", CaseRule(mode=CaseMode.LOWER), ext=".JPG") == "abc.JPG"


class TestSequentialRule:

    def test_uses_index(self):
        assert applied("photo", SequentialRule(), index=4) == "photo_005.jpg"

    def test_placement(self):
        assert applied("photo", SequentialRule(position=Placement.PREFIX)) == "001_photo.jpg"
        assert applied("photo", SequentialRule(position=Placement.REPLACE)) == "001.jpg"

    def test_start_and_padding(self):
        assert applied("p", SequentialRule(start=0, padding=2, separator="-")) == "p-00.jpg"
        assert applied("p", SequentialRule(start=7, padding=0), index=3) == "p_10.jpg"

    def test_number_longer_than_padding(self):
        assert applied("p", SequentialRule(padding=2), index=149) == "p_150.jpg"


class TestExtensionRules:

    def test_change_ext(self):
        assert applied("a", ChangeExtRule(value="png")) == "a.png"
        assert applied("a", ChangeExtRule(value=".png")) == "a.png"
        assert applied("a", ChangeExtRule(value="")) == "a"

    def test_filter_ext_is_noop(self):
        assert applied("a", FilterExtRule(extensions=["png"])) == "a.jpg"


class TestTrimSpacesRule:

    def test_modes(self):
        assert applied("  a  b  ", TrimSpacesRule(mode=TrimMode.TRIM)) == "a  b.jpg"
        assert applied("  a  b  ", TrimSpacesRule(mode=TrimMode.SINGLE)) == "a b.jpg"
        assert applied("  a  b  ", TrimSpacesRule(mode=TrimMode.REMOVE)) == "ab.jpg"


class TestDateRule:

    moment = datetime(2024, 3, 5, 14, 7, 9)

    def test_default_format(self):
        assert applied("photo", DateRenameRule(), mtime=self.moment) == "2024-03-05_photo.jpg"

    def test_tokens(self):
        rule = DateRenameRule(format="YYMMDD_HHmmss", position=Placement.SUFFIX, separator="-")
        assert applied("photo", rule, mtime=self.moment) == "photo-240305_140709.jpg"

    def test_replace_placement(self):
        rule = DateRenameRule(position=Placement.REPLACE)
        assert applied("photo", rule, mtime=self.moment) == "2024-03-05.jpg"

    def test_birthtime_source(self):
        rule = DateRenameRule(source=DateSource.BIRTHTIME)
        name = applied("p", rule, mtime=self.moment, birthtime=datetime(2020, 1, 2))
        assert name == "2020-01-02_p.jpg"

    def test_missing_timestamp(self):
        assert applied("p", DateRenameRule(source=DateSource.BIRTHTIME), mtime=self.moment) == "unknown_p.jpg"

    def test_format_date_text_passthrough(self):
        assert format_date(self.moment, "on YYYY.MM") == "on 2024.03"
        assert format_date(None, "YYYY") == "unknown"

    def test_substituted_value_not_reread(self):
        # "MM" expands to "05" for May; the "DD" after it is still its own token
        assert format_date(datetime(2024, 5, 6), "MMDD") == "0506"


class TestRegexRule:

    def test_replace_with_groups(self):
        assert applied("img12", RegexRule(find=r"(\d+)", replace="#$1")) == "img#12.jpg"

    def test_case_insensitive_default(self):
        assert applied("img1", RegexRule(find="IMG", replace="pic")) == "pic1.jpg"

    def test_invalid_pattern_leaves_name(self):
        assert applied("img(1", RegexRule(find="(", replace="x")) == "img(1.jpg"

    def test_empty_pattern_is_noop(self):
        assert applied("img", RegexRule(find="", replace="x")) == "img.jpg"


class TestPipeline:

    def test_rules_apply_in_order(self):
        rules = [PrefixRule(value="x_"), CaseRule(mode=CaseMode.UPPER)]
        assert apply_rules(NameParts("a", ".txt"), rules).name == "X_A.txt"
        assert apply_rules(NameParts("a", ".txt"), list(reversed(rules))).name == "x_A.txt"

    def test_pure(self):
        parts = NameParts("a", ".txt", mtime=datetime(2024, 1, 1))
        first = apply_rule(parts, SequentialRule(), 2)
        second = apply_rule(parts, SequentialRule(), 2)
        assert first == second
        assert parts.base == "a"
        assert first.mtime == parts.mtime

    def test_unknown_rule(self):
        with pytest.raises(TypeError):
            apply_rule(NameParts("a", ".txt"), object())

    def test_every_rule_has_an_applier(self):
        for tag in RULE_TYPES:
            result = apply_rule(NameParts("a b", ".txt"), new_rule(tag))
            assert isinstance(result, NameParts)
