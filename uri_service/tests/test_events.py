import logging

from token_uri.registry.config_store import ConfigStore
from token_uri.registry.events import ConfigurationChanged, ExplicitURIChanged, log_event


def test_log_event_writes_one_record_per_event(caplog):
    with caplog.at_level(logging.INFO, logger="token_uri.registry.events"):
        log_event(ConfigurationChanged(7, "ipfs://abc", True))
        log_event(ExplicitURIChanged(7, "ipfs://QmXYZ"))
        log_event(ExplicitURIChanged(7, ""))

    messages = [r.getMessage() for r in caplog.records]
    assert messages == [
        "base path configured: token_id=7 base_uri=ipfs://abc use_id_in_path=True",
        "explicit uri set: token_id=7 uri=ipfs://QmXYZ",
        "explicit uri cleared: token_id=7",
    ]


def test_listeners_run_in_registration_order():
    store = ConfigStore()
    calls = []
    store.subscribe(lambda e: calls.append(("first", e.token_id)))
    store.subscribe(lambda e: calls.append(("second", e.token_id)))

    store.set_explicit_uri(4, "ar://x")

    assert calls == [("first", 4), ("second", 4)]
