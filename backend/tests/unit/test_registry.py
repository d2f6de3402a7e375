from hive.domain.relay.registry import InMemorySessionRegistry


def test_register_and_lookup():
    registry = InMemorySessionRegistry()
    registry.register("user-1", "sid-1")
    assert registry.lookup("user-1") == "sid-1"
    assert registry.lookup("user-2") is None
    assert "user-1" in registry
    assert len(registry) == 1


def test_latest_connection_wins():
    registry = InMemorySessionRegistry()
    registry.register("user-1", "sid-1")
    registry.register("user-1", "sid-2")
    assert registry.lookup("user-1") == "sid-2"
    assert len(registry) == 1


def test_stale_unregister_keeps_newer_connection():
    registry = InMemorySessionRegistry()
    registry.register("user-1", "sid-1")
    registry.register("user-1", "sid-2")

    registry.unregister("user-1", "sid-1")
    assert registry.lookup("user-1") == "sid-2"

    registry.unregister("user-1", "sid-2")
    assert registry.lookup("user-1") is None


def test_unregister_without_connection_id_removes_user():
    registry = InMemorySessionRegistry()
    registry.register("user-1", "sid-1")
    registry.unregister("user-1")
    registry.unregister("user-1")
    assert "user-1" not in registry
