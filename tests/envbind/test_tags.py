"""Tests for field tag parsing."""

from __future__ import annotations

import pytest

from EnvBind import InvalidTagError, LoaderConfig
from EnvBind.tags import FieldOptions, parse_field_tag, parse_tag_flags


def test_empty_tag_uses_derived_name() -> None:
    assert parse_field_tag(None, "ServerURL") == FieldOptions(key="SERVER_URL")
    assert parse_field_tag("", "server_url").key == "SERVER_URL"


def test_explicit_key_and_flags() -> None:
    options = parse_field_tag("DB_HOST,required,docs_hidden", "host")
    assert options.key == "DB_HOST"
    assert options.required
    assert options.docs_hidden
    assert not options.squash
    assert not options.no_prefix


def test_flags_without_key_fall_back_to_derived_name() -> None:
    options = parse_field_tag(",map,required", "endpoints")
    assert options.key == "ENDPOINTS"
    assert options.is_map
    assert options.required


def test_ignore_sentinel_skips_field() -> None:
    options = parse_field_tag("-", "anything")
    assert options.ignored
    assert options.key == ""


def test_ignore_sentinel_wins_over_flags() -> None:
    assert parse_field_tag("-,required", "anything").ignored


def test_squash_sentinel_clears_key() -> None:
    options = parse_field_tag("&", "inner")
    assert options.squash
    assert options.key == ""


@pytest.mark.parametrize("flag", ["squash", "anonymous"])
def test_squash_flag_and_legacy_alias(flag: str) -> None:
    options = parse_field_tag(f"INNER,{flag}", "inner")
    assert options.squash
    assert options.key == ""


def test_no_prefix_marker_is_stripped() -> None:
    options = parse_field_tag("!ABSOLUTE_SIZE", "size")
    assert options.no_prefix
    assert options.key == "ABSOLUTE_SIZE"


def test_bare_no_prefix_marker_uses_derived_name() -> None:
    options = parse_field_tag("!", "AbsoluteSize")
    assert options.no_prefix
    assert options.key == "ABSOLUTE_SIZE"


@pytest.mark.parametrize("tag", ["!,squash", "!INNER,squash", "!INNER,anonymous"])
def test_squash_with_no_prefix_is_rejected(tag: str) -> None:
    with pytest.raises(InvalidTagError) as excinfo:
        parse_field_tag(tag, "inner")
    assert excinfo.value.field == "inner"


def test_unknown_flags_are_ignored() -> None:
    options = parse_field_tag("NAME,omitempty,required,future-flag", "name")
    assert options.required
    assert options.key == "NAME"


def test_parse_tag_flags_tolerates_whitespace() -> None:
    assert parse_tag_flags(" required , map ") == {
        "required": True,
        "squash": False,
        "is_map": True,
        "docs_hidden": False,
    }


def test_custom_sentinels() -> None:
    config = LoaderConfig(ignore_sentinel="skip", squash_sentinel="*", no_prefix_sentinel="^")
    assert parse_field_tag("skip", "name", config).ignored
    assert parse_field_tag("*", "inner", config).squash
    options = parse_field_tag("^ROOT", "name", config)
    assert options.no_prefix
    assert options.key == "ROOT"
    assert not parse_field_tag("-", "name", config).ignored
