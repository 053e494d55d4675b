import pytest

from token_uri.errors import InvalidArgument
from token_uri.registry.config_store import ConfigStore, TokenURIConfig
from token_uri.registry.resolver import UriResolver, compose_uri

DEFAULT_BASE = "https://api.example.com/meta/"


@pytest.fixture
def store() -> ConfigStore:
    return ConfigStore(default_base_uri=DEFAULT_BASE)


@pytest.fixture
def resolver(store: ConfigStore) -> UriResolver:
    return UriResolver(store)


@pytest.mark.parametrize("token_id", [0, 1, 7, 10**30, 2**256 - 1])
def test_unconfigured_token_resolves_to_default_verbatim(resolver, token_id):
    assert resolver.resolve(token_id) == DEFAULT_BASE


def test_default_without_trailing_slash_is_not_normalised():
    resolver = UriResolver(ConfigStore(default_base_uri="https://api.example.com/meta"))
    assert resolver.resolve(3) == "https://api.example.com/meta"


def test_base_path_with_id_inserts_separator(store, resolver):
    store.set_base_path_config(42, "ipfs://abc", True)
    assert resolver.resolve(42) == "ipfs://abc/42"


def test_base_path_with_trailing_slash_has_no_double_slash(store, resolver):
    store.set_base_path_config(42, "ipfs://abc/", True)
    assert resolver.resolve(42) == "ipfs://abc/42"


def test_base_path_without_id_is_returned_as_is(store, resolver):
    store.set_base_path_config(42, "ipfs://abc", False)
    assert resolver.resolve(42) == "ipfs://abc"


def test_large_id_is_rendered_in_plain_decimal(store, resolver):
    token_id = 2**256 - 1
    store.set_base_path_config(token_id, "ipfs://abc", True)
    assert resolver.resolve(token_id) == "ipfs://abc/" + str(token_id)
    assert resolver.resolve(token_id).endswith(
        "115792089237316195423570985008687907853269984665640564039457584007913129639935"
    )


def test_explicit_uri_wins_over_base_path(store, resolver):
    store.set_base_path_config(5, "ipfs://abc", True)
    store.set_explicit_uri(5, "ar://override")
    assert resolver.resolve(5) == "ar://override"

    # A later base-path write does not displace the override.
    store.set_base_path_config(5, "ipfs://other", False)
    assert resolver.resolve(5) == "ar://override"


def test_clear_explicit_uri_falls_back_to_base_path(store, resolver):
    store.set_base_path_config(5, "ipfs://abc", True)
    store.set_explicit_uri(5, "ar://override")
    store.clear_explicit_uri(5)
    assert resolver.resolve(5) == "ipfs://abc/5"


def test_clear_explicit_uri_on_unconfigured_token_falls_back_to_default(store, resolver):
    store.set_explicit_uri(9, "ar://override")
    store.clear_explicit_uri(9)
    assert resolver.resolve(9) == DEFAULT_BASE


def test_tokens_are_independent(store, resolver):
    store.set_base_path_config(1, "ipfs://one", True)
    store.set_explicit_uri(2, "ar://two")
    assert resolver.resolve(1) == "ipfs://one/1"
    assert resolver.resolve(2) == "ar://two"
    assert resolver.resolve(3) == DEFAULT_BASE


def test_empty_base_path_leaves_resolution_unchanged(store, resolver):
    store.set_base_path_config(4, "ipfs://abc", True)
    with pytest.raises(InvalidArgument):
        store.set_base_path_config(4, "", False)
    assert resolver.resolve(4) == "ipfs://abc/4"


def test_empty_explicit_uri_leaves_resolution_unchanged(store, resolver):
    with pytest.raises(InvalidArgument):
        store.set_explicit_uri(4, "")
    assert resolver.resolve(4) == DEFAULT_BASE


def test_resolve_is_repeatable(store, resolver):
    store.set_base_path_config(8, "https://cdn.example.com", True)
    assert resolver.resolve(8) == resolver.resolve(8)


def test_use_id_in_path_applies_to_default_base_for_unconfigured_record():
    # Not reachable through the store's writers; exercised directly.
    cfg = TokenURIConfig(use_id_in_path=True, is_configured=False)
    assert compose_uri(11, cfg, "https://api.example.com/meta") == "https://api.example.com/meta/11"


def test_scenario_from_default_to_override_and_back(store, resolver):
    assert resolver.resolve(7) == "https://api.example.com/meta/"

    store.set_base_path_config(7, "https://cdn.example.com/v2", True)
    assert resolver.resolve(7) == "https://cdn.example.com/v2/7"

    store.set_explicit_uri(7, "ipfs://QmXYZ")
    assert resolver.resolve(7) == "ipfs://QmXYZ"

    store.clear_explicit_uri(7)
    assert resolver.resolve(7) == "https://cdn.example.com/v2/7"
