import logging
import sqlite3
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass

import pymysql
from pymysql.cursors import DictCursor


@dataclass(frozen=True)
class ExecResult:
    """Outcome of a write statement: last insert id and affected row count."""
    last_insert_id: int | None
    rows_affected: int


class Database(ABC):
    """Executor contract shared by every backend.

    SQL handed to a backend always uses ``?`` placeholders; each backend
    translates them to its driver's paramstyle.
    """
    logger = logging.getLogger("mysql_knex")
    if not logger.handlers:
        logging.basicConfig(level=logging.INFO)

    def __init__(self):
        self.connection = None
        self._lock = threading.Lock()

    def _log(self, sql, params=None):
        msg = f"[SQL EXECUTE]: {sql}"
        if params:
            msg += f" | [PARAMS]: {list(params)}"
        self.logger.info(msg)

    def _fatal(self, message, error):
        self.logger.critical(f"{message}: {error}")
        raise SystemExit(f"{message}: {error}") from error

    def _discard(self, errors):
        """Close a handle that failed its liveness check; the check's error is what gets reported."""
        connection, self.connection = self.connection, None
        try:
            connection.close()
        except errors as e:
            self.logger.warning(f"Error closing unusable connection: {e}")

    def _require_connection(self):
        if self.connection is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self.connection

    @abstractmethod
    def connect(self):
        pass

    @abstractmethod
    def ping(self):
        pass

    @abstractmethod
    def close(self):
        pass

    @abstractmethod
    def execute(self, sql, params=()) -> ExecResult:
        pass

    @abstractmethod
    def query_rows(self, sql, params=()) -> list[dict]:
        pass

    def query_row(self, sql, params=()) -> dict | None:
        rows = self.query_rows(sql, params)
        return rows[0] if rows else None

    def table(self, name):
        from mysql_knex.builder import QueryBuilder
        return QueryBuilder(name, database=self)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class MySQLDatabase(Database):
    def __init__(self, config):
        super().__init__()
        self.config = config

    @staticmethod
    def _translate(sql):
        return sql.replace("%", "%%").replace("?", "%s")

    def connect(self):
        try:
            self.connection = pymysql.connect(
                host=self.config.host,
                port=self.config.port,
                user=self.config.user,
                password=self.config.password,
                database=self.config.database,
                charset=self.config.charset,
                cursorclass=DictCursor,
                autocommit=True,
            )
        except pymysql.MySQLError as e:
            self._fatal("Error opening database", e)

        try:
            self.ping()
        except pymysql.MySQLError as e:
            self._discard(pymysql.MySQLError)
            self._fatal("Error connecting to database", e)

        self.logger.info(f"Connected to DB successfully ({self.config.address()}/{self.config.database})")
        return self

    def ping(self):
        with self._lock:
            self._require_connection().ping(reconnect=False)

    def close(self):
        if self.connection is None:
            return
        try:
            self.connection.close()
        except pymysql.MySQLError as e:
            self._fatal("Error closing database", e)
        self.connection = None
        self.logger.info("Database connection closed")

    def execute(self, sql, params=()):
        params = tuple(params)
        self._log(sql, params)
        with self._lock:
            with self._require_connection().cursor() as cursor:
                cursor.execute(self._translate(sql), params)
                return ExecResult(cursor.lastrowid, cursor.rowcount)

    def query_rows(self, sql, params=()):
        params = tuple(params)
        self._log(sql, params)
        with self._lock:
            with self._require_connection().cursor() as cursor:
                cursor.execute(self._translate(sql), params)
                return list(cursor.fetchall())


class SQLiteDatabase(Database):
    """Embedded executor over sqlite3; same contract, native ``?`` placeholders."""

    def __init__(self, db_path=":memory:"):
        super().__init__()
        self.db_path = db_path

    def connect(self):
        try:
            self.connection = sqlite3.connect(self.db_path, check_same_thread=False)
            self.connection.row_factory = sqlite3.Row
        except sqlite3.Error as e:
            self._fatal("Error opening database", e)

        try:
            self.ping()
        except sqlite3.Error as e:
            self._discard(sqlite3.Error)
            self._fatal("Error connecting to database", e)

        self.logger.info(f"Connected to DB successfully ({self.db_path})")
        return self

    def ping(self):
        with self._lock:
            self._require_connection().execute("SELECT 1").fetchone()

    def close(self):
        if self.connection is None:
            return
        try:
            self.connection.close()
        except sqlite3.Error as e:
            self._fatal("Error closing database", e)
        self.connection = None
        self.logger.info("Database connection closed")

    def execute(self, sql, params=()):
        params = tuple(params)
        self._log(sql, params)
        with self._lock:
            connection = self._require_connection()
            cursor = connection.cursor()
            cursor.execute(sql, params)
            connection.commit()
            return ExecResult(cursor.lastrowid, cursor.rowcount)

    def query_rows(self, sql, params=()):
        params = tuple(params)
        self._log(sql, params)
        with self._lock:
            cursor = self._require_connection().cursor()
            cursor.execute(sql, params)
            return [dict(row) for row in cursor.fetchall()]


_default = None


def connect(config):
    """Open and ping a MySQL handle. Exits the process if the server is unreachable."""
    return MySQLDatabase(config).connect()


def init(config):
    """Connect and install the handle used by builders created without ``database=``.

    A handle installed by an earlier call is closed first.
    """
    global _default
    close()
    _default = connect(config)
    return _default


def get_database():
    if _default is None:
        raise RuntimeError("Database not initialized. Call init() first.")
    return _default


def close():
    global _default
    if _default is not None:
        _default.close()
        _default = None
