import logging
import re
import sqlite3
from datetime import date, datetime
from typing import Optional
from contextlib import contextmanager

from config import DATABASE_PATH
from models import Task

logger = logging.getLogger(__name__)

# Fields a partial update may touch; id, owner_id and created_at are fixed at creation
MUTABLE_FIELDS = ("text", "completed", "category", "priority", "scheduled_date", "scheduled_time")

# "9:00", "09:30", "2:15 pm"
_CLOCK_TIME = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*([ap]\.?m\.?)?", re.IGNORECASE)


class StoreError(Exception):
    """Raised when the task store cannot complete an operation."""


class TaskNotFoundError(StoreError):
    def __init__(self, task_id: str):
        super().__init__(f"Task {task_id} not found")
        self.task_id = task_id


@contextmanager
def get_db():
    """Context manager for database connections. sqlite errors surface as StoreError."""
    conn = sqlite3.connect(DATABASE_PATH)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    except sqlite3.Error as exc:
        logger.error("Database error: %s", exc)
        raise StoreError(str(exc)) from exc
    finally:
        conn.close()

def init_db():
    """Initialize database by running Alembic migrations."""
    import subprocess
    import os

    # Run alembic upgrade from the backend directory
    backend_dir = os.path.dirname(os.path.abspath(__file__))
    subprocess.run(
        ["alembic", "upgrade", "head"],
        cwd=backend_dir,
        env={**os.environ, "DATABASE_PATH": os.path.abspath(DATABASE_PATH)},
        check=True
    )

def _row_to_task(row) -> Task:
    """Convert a database row to a Task model."""
    return Task(
        id=row["id"],
        text=row["text"],
        completed=bool(row["completed"]),
        category=row["category"],
        priority=row["priority"],
        owner_id=row["owner_id"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        scheduled_date=row["scheduled_date"],
        scheduled_time=row["scheduled_time"],
    )

def _to_storage(value):
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, date):
        return value.isoformat()
    return value


def get_all_tasks(owner_id: Optional[str] = None, category: Optional[str] = None) -> list[Task]:
    """
    List tasks newest first.
    owner_id narrows the result to one user's tasks; None means no session, so everything is visible.
    """
    clauses = []
    params: list = []
    if owner_id is not None:
        clauses.append("owner_id = ?")
        params.append(owner_id)
    if category is not None:
        clauses.append("category = ?")
        params.append(category)
    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

    with get_db() as conn:
        rows = conn.execute(
            f"SELECT * FROM todos {where} ORDER BY created_at DESC, rowid DESC",
            params
        ).fetchall()
        return [_row_to_task(row) for row in rows]

def _time_sort_key(value: Optional[str]) -> tuple:
    """Clock times first (by minute of day), then other text, then untimed."""
    if value is None:
        return (2, 0, "")
    match = _CLOCK_TIME.match(value)
    if match is None:
        return (1, 0, value)
    hours, minutes, meridiem = int(match.group(1)), int(match.group(2)), match.group(3)
    if meridiem:
        hours = hours % 12 + (12 if meridiem.lower().startswith("p") else 0)
    return (0, hours * 60 + minutes, value)


def get_tasks_for_date(target_date: str, owner_id: Optional[str] = None) -> list[Task]:
    """
    Tasks placed on a calendar day (YYYY-MM-DD), timed ones first in time order.
    """
    sql = "SELECT * FROM todos WHERE scheduled_date = ?"
    params: list = [target_date]
    if owner_id is not None:
        sql += " AND owner_id = ?"
        params.append(owner_id)
    sql += " ORDER BY created_at, rowid"

    with get_db() as conn:
        rows = conn.execute(sql, params).fetchall()
    # Free-form times sort by clock value, not as text
    return sorted((_row_to_task(row) for row in rows), key=lambda task: _time_sort_key(task.scheduled_time))

def get_task_db(task_id: str) -> Task:
    with get_db() as conn:
        row = conn.execute("SELECT * FROM todos WHERE id = ?", (task_id,)).fetchone()
        if not row:
            raise TaskNotFoundError(task_id)
        return _row_to_task(row)

def create_task_db(
    task_id: str,
    text: str,
    category: Optional[str] = None,
    priority: Optional[str] = None,
    owner_id: Optional[str] = None,
    scheduled_date: Optional[date] = None,
    scheduled_time: Optional[str] = None
) -> Task:
    """Insert a task. category/priority are expected to be resolved by the caller."""
    now = datetime.now().isoformat()
    scheduled = _to_storage(scheduled_date)
    scheduled_time = scheduled_time or None

    with get_db() as conn:
        conn.execute(
            """INSERT INTO todos
               (id, text, completed, category, priority, owner_id, created_at, updated_at, scheduled_date, scheduled_time)
               VALUES (?, ?, 0, ?, ?, ?, ?, ?, ?, ?)""",
            (task_id, text, category, priority, owner_id, now, now, scheduled, scheduled_time)
        )
        conn.commit()

    return Task(
        id=task_id,
        text=text,
        completed=False,
        category=category,
        priority=priority,
        owner_id=owner_id,
        created_at=now,
        updated_at=now,
        scheduled_date=scheduled,
        scheduled_time=scheduled_time,
    )

def update_task_db(task_id: str, **updates) -> Task:
    """
    Update a task with any fields provided.
    Only writes fields that differ from current values; updated_at moves only when something changed.

    Args:
        task_id: Task ID to update
        **updates: Field names and values to update (see MUTABLE_FIELDS)

    Raises:
        TaskNotFoundError: no task with this id
    """
    with get_db() as conn:
        row = conn.execute("SELECT * FROM todos WHERE id = ?", (task_id,)).fetchone()
        if not row:
            raise TaskNotFoundError(task_id)

        changes = {}
        for field, new_value in updates.items():
            if field not in MUTABLE_FIELDS:
                continue
            new_value = _to_storage(new_value)
            if new_value != row[field]:
                changes[field] = new_value

        if changes:
            changes["updated_at"] = datetime.now().isoformat()
            set_clause = ", ".join(f"{field} = ?" for field in changes.keys())
            values = list(changes.values()) + [task_id]
            conn.execute(f"UPDATE todos SET {set_clause} WHERE id = ?", values)
            conn.commit()

        # Return updated task (re-fetch to get current state)
        updated_row = conn.execute("SELECT * FROM todos WHERE id = ?", (task_id,)).fetchone()
        return _row_to_task(updated_row)

def delete_task_db(task_id: str) -> None:
    with get_db() as conn:
        cursor = conn.execute("DELETE FROM todos WHERE id = ?", (task_id,))
        conn.commit()
        if cursor.rowcount == 0:
            raise TaskNotFoundError(task_id)
