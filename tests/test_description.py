from actnames.description import (
    LABEL_ALIAS,
    LABEL_COMMEMORATED_NAME,
    LABEL_FEATURE_NAME,
    LABEL_TITLE,
    LabelledValue,
    ParsedDescription,
    build_named_after_label,
    clean_value,
    format_biography_preview,
    get_label_value,
    parse_description,
)

MAWSON_PARK = "Feature name: Mawson Park\nCommemorated Name: Sir Mawson\nBiography: A noted explorer."


class TestCleanValue:
    def test_collapses_internal_whitespace(self):
        assert clean_value("  Sir \t Douglas\n Mawson  ") == "Sir Douglas Mawson"

    def test_non_string_is_empty(self):
        assert clean_value(None) == ""
        assert clean_value(42) == ""

    def test_bom_and_ideographic_space_trimmed(self):
        assert clean_value("\ufeff Cook \u3000") == "Cook"

    def test_next_line_is_not_whitespace(self):
        assert clean_value("\x85Cook") == "\x85Cook"


class TestParseDescription:
    def test_labelled_fields(self):
        parsed = parse_description(MAWSON_PARK)
        assert parsed.feature_name == "Mawson Park"
        assert parsed.commemorated_name == "Sir Mawson"
        assert parsed.biography == "A noted explorer."
        assert parsed.labelled_values == (
            LabelledValue(LABEL_FEATURE_NAME, "Mawson Park"),
            LabelledValue(LABEL_COMMEMORATED_NAME, "Sir Mawson"),
        )

    def test_pure_prose_becomes_biography(self):
        parsed = parse_description("Just a nice street.")
        assert parsed.biography == "Just a nice street."
        assert parsed.labelled_values == ()
        assert parsed.feature_name == ""
        assert parsed.commemorated_name == ""

    def test_prose_fallback_is_whitespace_collapsed(self):
        parsed = parse_description("  Just   a nice\n street.  ")
        assert parsed.biography == "Just a nice street."

    def test_is_deterministic(self):
        text = "Title: Dr\nGiven names: Ann\r\nBiography: Botanist.\nrandom: colon"
        assert parse_description(text) == parse_description(text)

    def test_leading_bom_on_key(self):
        parsed = parse_description(f"\ufeff{MAWSON_PARK}")
        assert parsed.feature_name == "Mawson Park"

    def test_crlf_line_endings(self):
        parsed = parse_description("Title: Sir\r\nGiven names: Douglas\r\nCommemorated name: Mawson")
        assert parsed.title == "Sir"
        assert parsed.given_names == "Douglas"
        assert parsed.commemorated_name == "Mawson"

    def test_later_duplicate_overwrites(self):
        parsed = parse_description("Title: Dr\nTitle: Sir")
        assert parsed.title == "Sir"

    def test_key_whitespace_and_case_normalised(self):
        parsed = parse_description("  Commemorated    NAME :   Sir   Mawson ")
        assert parsed.commemorated_name == "Sir Mawson"

    def test_value_keeps_case(self):
        parsed = parse_description("alias: McKELLAR")
        assert parsed.alias == "McKELLAR"

    def test_only_first_colon_splits(self):
        parsed = parse_description("Biography: Born: 1882 in Yorkshire")
        assert parsed.biography == "Born: 1882 in Yorkshire"

    def test_empty_value_skipped(self):
        parsed = parse_description("Title:\nBiography: Something.")
        assert parsed.title == ""
        assert parsed.biography == "Something."

    def test_single_character_key_ignored(self):
        parsed = parse_description("A: Title")
        assert parsed.labelled_values == ()
        assert parsed.biography == "A: Title"

    def test_overlong_key_ignored(self):
        key = "title " + "x" * 34  # 40 characters
        parsed = parse_description(f"{key}: Sir")
        assert parsed.title == ""

    def test_none_values_dropped_from_labelled_values(self):
        parsed = parse_description("Alias: None\nTitle: NONE\nGiven names: none\nFeature name: Zed Lane")
        assert parsed.alias == "None"
        assert parsed.labelled_values == (LabelledValue(LABEL_FEATURE_NAME, "Zed Lane"),)

    def test_labelled_values_never_empty_or_none(self):
        texts = [
            "",
            "Alias: none",
            "Title:    \nAlias:  None  ",
            "Feature name: X\nCommemorated name: none\nGiven names: \nTitle: Dr",
            ":::",
            "\n\n\r\n",
        ]
        for text in texts:
            for entry in parse_description(text).labelled_values:
                assert entry.value
                assert entry.value.lower() != "none"

    def test_labelled_values_fixed_order(self):
        text = "Alias: Bert\nTitle: Dr\nGiven names: Albert\nCommemorated name: Smith\nFeature name: Smith St"
        labels = [entry.label for entry in parse_description(text).labelled_values]
        assert labels == ["Feature name", "Commemorated name", "Given names", "Title", "Alias"]

    def test_lines_without_colon_are_skipped(self):
        text = "Some prose here\nCommemorated name: Cook\nmore prose"
        parsed = parse_description(text)
        assert parsed.commemorated_name == "Cook"
        assert parsed.biography == "Some prose here Commemorated name: Cook more prose"

    def test_non_string_input(self):
        assert parse_description(None) == ParsedDescription()
        assert parse_description(123) == ParsedDescription()

    def test_empty_input(self):
        parsed = parse_description("")
        assert parsed.biography == ""
        assert parsed.labelled_values == ()


class TestGetLabelValue:
    def test_present(self):
        parsed = parse_description("Title: Sir")
        assert get_label_value(parsed, LABEL_TITLE) == "Sir"

    def test_none_literal_reads_as_missing(self):
        parsed = parse_description("Alias: None")
        assert get_label_value(parsed, LABEL_ALIAS) == ""


class TestBuildNamedAfterLabel:
    def test_full_name(self):
        label = build_named_after_label(
            title="Sir", given_names="Douglas", commemorated_name="Mawson", fallback_name="X"
        )
        assert label == "Sir Douglas Mawson"

    def test_skips_empty_pieces(self):
        assert build_named_after_label(commemorated_name="Mawson", title="Sir") == "Sir Mawson"

    def test_pieces_are_cleaned(self):
        label = build_named_after_label(title=" Sir ", given_names="Douglas   Charles", commemorated_name="\tMawson")
        assert label == "Sir Douglas Charles Mawson"

    def test_fallback_name(self):
        assert build_named_after_label(fallback_name="Ainslie") == "Ainslie"

    def test_not_specified(self):
        assert build_named_after_label() == "Not specified"
        assert build_named_after_label(fallback_name="   ") == "Not specified"


class TestFormatBiographyPreview:
    def test_long_text_is_cut_with_ellipsis(self):
        text = "a" * 400
        assert format_biography_preview(text, 340) == "a" * 340 + "..."

    def test_default_length_is_340(self):
        assert format_biography_preview("b" * 400) == "b" * 340 + "..."

    def test_short_text_unchanged(self):
        text = "c" * 300
        assert format_biography_preview(text) == text

    def test_exact_length_unchanged(self):
        text = "d" * 340
        assert format_biography_preview(text) == text

    def test_cut_is_trimmed(self):
        text = "word " * 80  # cleaned to 399 characters
        preview = format_biography_preview(text, 340)
        assert preview == ("word " * 68).strip() + "..."

    def test_cut_is_not_word_aware(self):
        text = "abcdefghij" * 30
        assert format_biography_preview(text, 220) == text[:220] + "..."

    def test_input_is_cleaned_first(self):
        assert format_biography_preview("  spaced   out  ", 340) == "spaced out"
