from __future__ import annotations

from dbvisor.application.analysis.registry import CancellationRegistry


def test_register_returns_unsignalled_flag() -> None:
    registry = CancellationRegistry()
    flag = registry.register("/tmp/a.db")

    assert not flag.is_set()
    assert registry.is_active("/tmp/a.db")


def test_register_again_signals_previous_flag() -> None:
    registry = CancellationRegistry()
    first = registry.register("/tmp/a.db")
    second = registry.register("/tmp/a.db")

    assert first.is_set()
    assert not second.is_set()
    assert registry.active_ids() == ["/tmp/a.db"]


def test_cancel_signals_and_removes() -> None:
    registry = CancellationRegistry()
    flag = registry.register("/tmp/a.db")

    assert registry.cancel("/tmp/a.db") is True
    assert flag.is_set()
    assert not registry.is_active("/tmp/a.db")
    assert registry.cancel("/tmp/a.db") is False


def test_cancel_unknown_target_is_noop() -> None:
    registry = CancellationRegistry()
    other = registry.register("/tmp/b.db")

    assert registry.cancel("/tmp/missing.db") is False
    assert not other.is_set()


def test_unregister_only_removes_matching_flag() -> None:
    registry = CancellationRegistry()
    stale = registry.register("/tmp/a.db")
    current = registry.register("/tmp/a.db")

    assert registry.unregister("/tmp/a.db", stale) is False
    assert registry.is_active("/tmp/a.db")
    assert registry.unregister("/tmp/a.db", current) is True
    assert not registry.is_active("/tmp/a.db")
    assert not current.is_set()


def test_targets_are_independent() -> None:
    registry = CancellationRegistry()
    a = registry.register("/tmp/a.db")
    b = registry.register("/tmp/b.db")

    registry.cancel("/tmp/a.db")

    assert a.is_set()
    assert not b.is_set()
    assert registry.active_ids() == ["/tmp/b.db"]
