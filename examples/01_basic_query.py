"""
Example 01: Basic Query Execution

This example binds dynamic values as parameters and decodes rows back into
dynamic values. Point DATABASE_URL at a PostgreSQL database to run it.
"""

import os

from dyn_query import (
    VOID,
    ConnectionConfig,
    Engine,
    Int,
    String,
    UnsupportedTypeError,
    to_python,
    vector,
)


def main():
    config = ConnectionConfig(
        conninfo=os.environ.get("DATABASE_URL", "dbname=postgres"),
        pool_size=1,
    )

    with Engine.from_config(config) as engine:
        engine.batch_execute("CREATE TEMP TABLE users (id INTEGER, name TEXT, nickname TEXT)")

        print("=== Basic Query Execution ===\n")

        # execute: parameters are always a Vector, even for one value
        affected = engine.execute(
            "INSERT INTO users (id, name, nickname) VALUES ($1, $2, $3)",
            vector(Int(1), String("Alice"), String("al")),
        )
        print(f"execute result: {affected}")

        # Void binds as NULL whatever the column type
        engine.execute(
            "INSERT INTO users (id, name, nickname) VALUES ($1, $2, $3)",
            vector(Int(2), String("Bob"), VOID),
        )

        # query: always a Vector of row Vectors
        rows = engine.query("SELECT id, name, nickname FROM users ORDER BY id")
        print(f"query result: {rows}")
        print(f"as Python: {to_python(rows)}\n")

        # query with parameters
        rows = engine.query("SELECT name FROM users WHERE id = $1", vector(Int(2)))
        print(f"parameterized query: {to_python(rows)}\n")

        # Column types without a decoding rule fail the call, not the process
        try:
            engine.query("SELECT now()")
        except UnsupportedTypeError as e:
            print(f"unsupported: {e}")


if __name__ == "__main__":
    main()
