from dsa_tutor.settings import (
    DEFAULT_USER_ID, get_active_user, get_setting, set_active_user, set_setting,
)


def test_setting_round_trip(db):
    assert get_setting(db, "missing") is None
    assert get_setting(db, "missing", "fallback") == "fallback"
    set_setting(db, "theme", "dark")
    set_setting(db, "theme", "light")
    assert get_setting(db, "theme") == "light"


def test_active_user_defaults_and_switches(db):
    assert get_active_user(db) == DEFAULT_USER_ID
    set_active_user(db, "alice")
    assert get_active_user(db) == "alice"
