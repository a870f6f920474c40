import pytest

from mysql_knex import database as database_module
from mysql_knex.database import Database, ExecResult, SQLiteDatabase


class RecordingDatabase(Database):
    """Executor that records every statement and replays canned rows."""

    def __init__(self, rows=None, result=None):
        super().__init__()
        self.rows = rows or []
        self.result = result or ExecResult(last_insert_id=1, rows_affected=1)
        self.calls = []

    def connect(self):
        return self

    def ping(self):
        pass

    def close(self):
        pass

    def execute(self, sql, params=()):
        self.calls.append(("execute", sql, list(params)))
        return self.result

    def query_rows(self, sql, params=()):
        self.calls.append(("query", sql, list(params)))
        return list(self.rows)


@pytest.fixture()
def recorder():
    return RecordingDatabase()


@pytest.fixture()
def sqlite_db():
    db = SQLiteDatabase(":memory:").connect()
    db.execute(
        "CREATE TABLE users (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT, age INTEGER, avatar BLOB)"
    )
    yield db
    db.close()


@pytest.fixture()
def default_database(monkeypatch):
    db = RecordingDatabase()
    monkeypatch.setattr(database_module, "_default", db)
    return db
