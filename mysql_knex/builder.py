import logging
from collections.abc import Mapping

from mysql_knex.database import ExecResult, get_database

logger = logging.getLogger("mysql_knex")


class RecordNotFound(LookupError):
    """first() matched no row."""


class UnsafeQueryError(ValueError):
    """UPDATE/DELETE without WHERE on a builder created with require_where=True."""


def _pairs(data):
    if isinstance(data, Mapping):
        return list(data.items())
    return [(column, value) for column, value in data]


def normalize_record(row):
    """Decode byte-like column values to text; everything else is left as is."""
    record = {}
    for key, value in row.items():
        if isinstance(value, (bytes, bytearray, memoryview)):
            value = bytes(value).decode("utf-8", errors="replace")
        record[key] = value
    return record


class QueryBuilder:
    """Accumulates clauses against one table and renders/executes one statement.

    Configuration methods return the builder itself so calls can be chained::

        users = db("users", database).where_condition("age", ">", 18).order_by("age").get()

    A builder is meant for a single statement on a single thread. Terminal
    methods (first, get, insert, update, delete) re-render from the current
    state every time they are called.
    """

    def __init__(self, table: str, database=None, require_where: bool = False):
        self._table = table
        self._database = database
        self.require_where = require_where
        self.select_columns = []
        self.where_clauses = []
        self.where_args = []
        self.order_by_column = ""
        self.order_by_direction = ""
        self.limit_value = 0
        self.offset_value = 0

    @property
    def table(self):
        return self._table

    @property
    def database(self):
        if self._database is None:
            return get_database()
        return self._database

    def select(self, *columns):
        self.select_columns = list(columns)
        return self

    def where_equal(self, conditions):
        for column, value in _pairs(conditions):
            self._add_where(f"{column} = ?", value)
        return self

    def where_condition(self, column, operator, value):
        self._add_where(f"{column} {operator} ?", value)
        return self

    def _add_where(self, clause, value):
        self.where_clauses.append(clause)
        self.where_args.append(value)

    def order_by(self, column, direction="ASC"):
        self.order_by_column = column
        self.order_by_direction = direction
        return self

    def limit(self, value: int):
        self.limit_value = value
        return self

    def offset(self, value: int):
        self.offset_value = value
        return self

    def _where_sql(self):
        if not self.where_clauses:
            return ""
        return " WHERE " + " AND ".join(self.where_clauses)

    def build_select_query(self):
        columns = ", ".join(self.select_columns) if self.select_columns else "*"
        sql = f"SELECT {columns} FROM {self._table}"
        sql += self._where_sql()

        if self.order_by_column:
            sql += f" ORDER BY {self.order_by_column} {self.order_by_direction}"
        if self.limit_value > 0:
            sql += f" LIMIT {self.limit_value}"
        if self.offset_value > 0:
            sql += f" OFFSET {self.offset_value}"

        return sql, list(self.where_args)

    def build_insert_query(self, data):
        pairs = _pairs(data)
        if not pairs:
            raise ValueError(f"Cannot INSERT into {self._table} without data")
        columns = ", ".join(column for column, _ in pairs)
        placeholders = ", ".join("?" for _ in pairs)
        sql = f"INSERT INTO {self._table} ({columns}) VALUES ({placeholders})"
        return sql, [value for _, value in pairs]

    def build_update_query(self, data):
        pairs = _pairs(data)
        if not pairs:
            raise ValueError(f"Cannot UPDATE {self._table} without data")
        set_clause = ", ".join(f"{column} = ?" for column, _ in pairs)
        sql = f"UPDATE {self._table} SET {set_clause}" + self._where_sql()
        return sql, [value for _, value in pairs] + list(self.where_args)

    def build_delete_query(self):
        sql = f"DELETE FROM {self._table}" + self._where_sql()
        return sql, list(self.where_args)

    def _check_unguarded(self, statement):
        if self.where_clauses:
            return
        if self.require_where:
            raise UnsafeQueryError(f"Refusing to {statement} {self._table} without WHERE")
        logger.warning(f"Running {statement} on {self._table} without WHERE: every row is affected")

    def first(self):
        self.limit(1)
        sql, args = self.build_select_query()
        row = self.database.query_row(sql, args)
        if row is None:
            raise RecordNotFound(f"No rows in {self._table} matching {sql} {args}")
        return normalize_record(row)

    def get(self):
        sql, args = self.build_select_query()
        return [normalize_record(row) for row in self.database.query_rows(sql, args)]

    fetch_all = get

    def insert(self, data) -> ExecResult:
        sql, args = self.build_insert_query(data)
        return self.database.execute(sql, args)

    def update(self, data) -> ExecResult:
        sql, args = self.build_update_query(data)
        self._check_unguarded("UPDATE")
        return self.database.execute(sql, args)

    def delete(self) -> ExecResult:
        self._check_unguarded("DELETE")
        sql, args = self.build_delete_query()
        return self.database.execute(sql, args)


def db(table, database=None):
    return QueryBuilder(table, database=database)


def new_query_builder(table, database=None):
    return QueryBuilder(table, database=database)
