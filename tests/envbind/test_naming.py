"""Tests for default key derivation from field identifiers."""

from __future__ import annotations

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from EnvBind.naming import convert_field_name


@pytest.mark.parametrize(
    ("identifier", "expected"),
    [
        ("Name", "NAME"),
        ("REST", "REST"),
        ("APIVersion", "API_VERSION"),
        ("ServerURL", "SERVER_URL"),
        ("ModuleName", "MODULE_NAME"),
        ("MinAPIVersion", "MIN_API_VERSION"),
        ("Area51", "AREA_51"),
        ("IPV4Address", "IPV4_ADDRESS"),
        ("serverURL", "SERVER_URL"),
        ("server_url", "SERVER_URL"),
        ("ipv4_address", "IPV4_ADDRESS"),
        ("Server_URL", "SERVER_URL"),
        ("URL_Path", "URL_PATH"),
        ("name", "NAME"),
        ("", ""),
    ],
)
def test_convert_field_name(identifier: str, expected: str) -> None:
    assert convert_field_name(identifier) == expected


@given(identifier=st.from_regex(r"[A-Za-z][A-Za-z0-9]{0,24}", fullmatch=True))
@settings(max_examples=200)
def test_convert_field_name_only_inserts_separators(identifier: str) -> None:
    """Derivation upper-cases and adds separators but never drops characters."""

    derived = convert_field_name(identifier)
    assert derived == derived.upper()
    assert derived.replace("_", "") == identifier.upper()
    assert "__" not in derived
    assert not derived.startswith("_")


@given(identifier=st.from_regex(r"[a-z][a-z0-9]*(_[a-z0-9]+)+", fullmatch=True))
def test_snake_case_identifiers_are_upper_cased(identifier: str) -> None:
    assert convert_field_name(identifier) == identifier.upper()
