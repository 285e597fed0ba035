import pytest

from application.services.presence import PresenceDirectory, channel_for


def test_channel_for_coerces_numeric_and_string_ids_to_same_key():
    assert channel_for(5) == channel_for("5") == "5"
    assert channel_for(" 42 ") == "42"


@pytest.mark.parametrize("bad", [None, "", "   ", True, False])
def test_channel_for_rejects_missing_ids(bad):
    with pytest.raises(ValueError):
        channel_for(bad)


def test_register_then_lookup():
    directory = PresenceDirectory()
    result = directory.register(1, "sock1")
    assert result.channel == "1"
    assert result.displaced_connection is None
    assert directory.lookup("1") == "sock1"
    assert directory.is_online(1)
    assert directory.user_of("sock1") == "1"


def test_later_registration_overwrites_earlier_one():
    directory = PresenceDirectory()
    directory.register(1, "sockA")
    result = directory.register("1", "sockB")

    assert result.displaced_connection == "sockA"
    assert directory.lookup(1) == "sockB"
    assert directory.user_of("sockA") is None
    assert len(directory) == 1


def test_unregister_of_displaced_connection_keeps_new_owner():
    directory = PresenceDirectory()
    directory.register(1, "sockA")
    directory.register(1, "sockB")

    assert directory.unregister("sockA") == []
    assert directory.lookup(1) == "sockB"


def test_unregister_removes_entry_and_is_idempotent():
    directory = PresenceDirectory()
    directory.register(1, "sock1")
    directory.register(2, "sock2")

    assert directory.unregister("sock1") == ["1"]
    assert directory.unregister("sock1") == []
    assert directory.lookup(1) is None
    assert directory.snapshot() == {"2": "sock2"}


def test_connection_switching_user_releases_previous_entry():
    directory = PresenceDirectory()
    directory.register(1, "sock")
    result = directory.register(2, "sock")

    assert result.previous_channel == "1"
    assert directory.lookup(1) is None
    assert directory.lookup(2) == "sock"


def test_reregister_same_user_same_connection_is_noop():
    directory = PresenceDirectory()
    directory.register(1, "sock")
    result = directory.register(1, "sock")
    assert result.displaced_connection is None
    assert result.previous_channel is None
    assert directory.snapshot() == {"1": "sock"}


def test_directories_are_independent():
    first, second = PresenceDirectory(), PresenceDirectory()
    first.register(1, "sock")
    assert second.lookup(1) is None
