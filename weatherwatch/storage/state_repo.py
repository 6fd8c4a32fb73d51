"""Repository for key/value state and cycle tracking."""

import sqlite3

# --- Key/value state ---

def get_value(conn: sqlite3.Connection, key: str) -> str | None:
    """Get the raw stored value for a key."""
    row = conn.execute(
        "SELECT value FROM kv_store WHERE key = ?", (key,)
    ).fetchone()
    if row is None:
        return None
    return row[0]


def set_value(conn: sqlite3.Connection, key: str, value: str) -> None:
    """Replace the whole value for a key."""
    conn.execute(
        "INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP) "
        "ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = CURRENT_TIMESTAMP",
        (key, value),
    )
    conn.commit()


# --- Cycles ---

def create_cycle(conn: sqlite3.Connection, cycle_id: str, trigger: str) -> None:
    """Record the start of a poll cycle."""
    conn.execute(
        "INSERT INTO cycles (cycle_id, trigger) VALUES (?, ?)",
        (cycle_id, trigger),
    )
    conn.commit()


def complete_cycle(
    conn: sqlite3.Connection,
    cycle_id: str,
    status: str,
    error_message: str | None = None,
    **metrics: int | None,
) -> None:
    """Record cycle completion with metrics."""
    sets = ["completed_at = CURRENT_TIMESTAMP", "status = ?"]
    params: list = [status]

    if error_message is not None:
        sets.append("error_message = ?")
        params.append(error_message)
    for key, val in metrics.items():
        if val is not None:
            sets.append(f"{key} = ?")
            params.append(val)

    params.append(cycle_id)
    conn.execute(f"UPDATE cycles SET {', '.join(sets)} WHERE cycle_id = ?", params)
    conn.commit()


def get_latest_cycle(conn: sqlite3.Connection) -> dict | None:
    """Get the most recent cycle."""
    row = conn.execute(
        "SELECT * FROM cycles ORDER BY id DESC LIMIT 1"
    ).fetchone()
    if row is None:
        return None
    return dict(row)


def get_recent_cycles(conn: sqlite3.Connection, limit: int = 20) -> list[dict]:
    """Get recent cycles, newest first."""
    rows = conn.execute(
        "SELECT * FROM cycles ORDER BY id DESC LIMIT ?", (limit,)
    ).fetchall()
    return [dict(r) for r in rows]
