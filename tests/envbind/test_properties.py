"""Property-based checks tying loading and documentation together."""

from __future__ import annotations

from datetime import timedelta

import numpy as np
from hypothesis import given, settings
from hypothesis import strategies as st

from EnvBind import Loader, MappingSource, collect_docs

from tests.envbind.records import Endpoint, OuterStruct, Scalars, ServiceClientConfig

_prefixes = st.from_regex(r"([A-Z][A-Z0-9]{0,6}_)?", fullmatch=True)
_text = st.text(max_size=20)


@given(prefix=_prefixes, name=_text, color=_text)
def test_strings_load_verbatim_under_any_prefix(prefix: str, name: str, color: str) -> None:
    cfg = OuterStruct()
    Loader(MappingSource({f"{prefix}NAME": name, f"{prefix}INNER_COLOR": color})).load(prefix, cfg)
    assert cfg.name == name
    assert cfg.inner.color == color
    assert cfg.name_ptr is None


@given(
    tiny=st.integers(min_value=-128, max_value=127),
    small=st.integers(min_value=0, max_value=255),
    wide=st.integers(min_value=0, max_value=2**64 - 1),
)
def test_sized_integers_round_trip(tiny: int, small: int, wide: int) -> None:
    cfg = Scalars()
    Loader(
        MappingSource({"TINY": str(tiny), "SMALL_UNSIGNED": hex(small), "WIDE_UNSIGNED": str(wide)})
    ).load("", cfg)
    assert cfg.tiny == np.int8(tiny)
    assert cfg.small_unsigned == np.uint8(small)
    assert int(cfg.wide_unsigned) == wide


@given(
    url=st.from_regex(r"https://[a-z]{1,10}", fullmatch=True),
    seconds=st.integers(min_value=1, max_value=10**6),
)
@settings(max_examples=50)
def test_inlined_template_values_load_back(url: str, seconds: int) -> None:
    skeleton = ServiceClientConfig(
        server_rest_base_url=url,
        test_duration=timedelta(seconds=seconds),
        debug=False,
        endpoints={"eu": Endpoint(url=url)},
    )
    values = {entry.lookup_key: entry.value for entry in collect_docs("APP_", skeleton) if entry.value}

    loaded = ServiceClientConfig(endpoints={"eu": Endpoint()})
    Loader(MappingSource(values)).load("APP_", loaded)

    assert loaded.server_rest_base_url == url
    assert loaded.test_duration == timedelta(seconds=seconds)
    assert loaded.endpoints["eu"].url == url
    assert loaded.struct.mode == "fast"
