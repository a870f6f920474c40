"""
Walkthrough of the builder API.

Runs against MySQL when MYSQL_USER/MYSQL_DATABASE are set (directly or in .env),
otherwise against an in-memory SQLite database.
"""
import os

from mysql_knex import DBConfig, RecordNotFound, SQLiteDatabase, connect


def open_database():
    if os.getenv("MYSQL_DATABASE") or os.getenv("MYSQL_NAME"):
        return connect(DBConfig.from_env())
    return SQLiteDatabase(":memory:").connect()


def run_example():
    with open_database() as database:
        if isinstance(database, SQLiteDatabase):
            ddl = "CREATE TABLE IF NOT EXISTS pets (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT, species TEXT, age INTEGER)"
        else:
            ddl = "CREATE TABLE IF NOT EXISTS pets (id INTEGER PRIMARY KEY AUTO_INCREMENT, name VARCHAR(64), species VARCHAR(32), age INTEGER)"
        database.execute(ddl)

        print("--- 1. Insert ---")
        for name, species, age in [("Rex", "dog", 5), ("Mruczek", "cat", 3), ("Burek", "dog", 9)]:
            result = database.table("pets").insert([("name", name), ("species", species), ("age", age)])
            print(f"Inserted {name} with id {result.last_insert_id}")

        print("\n--- 2. Select ---")
        dogs = (database.table("pets")
                .select("id", "name", "age")
                .where_equal({"species": "dog"})
                .where_condition("age", ">", 4)
                .order_by("age", "DESC")
                .get())
        for dog in dogs:
            print(f"  {dog['name']} - age {dog['age']}")

        print("\n--- 3. Update ---")
        updated = database.table("pets").where_equal({"name": "Rex"}).update({"age": 6})
        print(f"Rows updated: {updated.rows_affected}")
        print(database.table("pets").where_equal({"name": "Rex"}).first())

        print("\n--- 4. Delete ---")
        database.table("pets").where_condition("species", "=", "cat").delete()
        try:
            database.table("pets").where_equal({"name": "Mruczek"}).first()
        except RecordNotFound:
            print("Mruczek is gone")


if __name__ == "__main__":
    run_example()
