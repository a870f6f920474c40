# mysql-knex - a Knex-style query builder for MySQL
from mysql_knex.builder import QueryBuilder, RecordNotFound, UnsafeQueryError, db, new_query_builder, normalize_record
from mysql_knex.config import DBConfig
from mysql_knex.database import Database, ExecResult, MySQLDatabase, SQLiteDatabase, close, connect, get_database, init

__version__ = "0.1.0"
__all__ = [
    "QueryBuilder", "RecordNotFound", "UnsafeQueryError", "db", "new_query_builder", "normalize_record",
    "DBConfig",
    "Database", "ExecResult", "MySQLDatabase", "SQLiteDatabase", "close", "connect", "get_database", "init",
]
