"""Key/value settings stored alongside the learner's data."""
from dsa_tutor.db import get_connection

DEFAULT_USER_ID = "user1"


def get_setting(db_path: str, key: str, default: str = None) -> str | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT value FROM user_settings WHERE key = ?", (key,)).fetchone()
    conn.close()
    return row["value"] if row else default


def set_setting(db_path: str, key: str, value: str) -> None:
    conn = get_connection(db_path)
    conn.execute(
        "INSERT INTO user_settings (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value=?",
        (key, value, value),
    )
    conn.commit()
    conn.close()


def get_active_user(db_path: str) -> str:
    return get_setting(db_path, "user_id", DEFAULT_USER_ID)


def set_active_user(db_path: str, user_id: str) -> None:
    set_setting(db_path, "user_id", user_id)
