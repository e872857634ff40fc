# amadeus

A small library for working with SQLite databases, with a compact,
self-describing binary format for moving query arguments and results around.

## Contents

- `amadeus.database` – `Database`, one SQLite connection. `Database.instance()`
  returns a process-wide shared object; `Database()` makes a separate one. It
  offers `open`, `create`, `close`, `exec`, `insert`, `update`, `select`, the
  `is_open` property, `Database.version()` (the SQLite library version) and can
  be used as a context manager, which closes it on exit. Failures to open,
  create or close raise `DatabaseError`.
- `amadeus.stmt` – `Stmt`, which runs one query on a `sqlite3.Connection`:
  `exec` for statements that return no rows and `exec_with_result` for those
  that do. Invalid or failing queries raise `StatementError`.
- `amadeus.query` – `Query`, an SQL command with positional arguments.
  `valid()` reports whether the number of `?` placeholders equals the number
  of arguments; running a query that is not valid raises `StatementError`.
- `amadeus.value` – `Value` (NULL, 64-bit integer, float, text or bytes) and
  `ValueKind`.
- `amadeus.field` – `Field`, a name paired with a `Value`.
- `amadeus.row` – `Row`, fields keyed by name (`add`, `add_field`, `get`,
  `split`, iteration, `len`, `in`).
- `amadeus.result` – `Result`, an ordered list of rows (`add`, indexing,
  iteration, `len`).
- `amadeus.compression` – `compress` and `decompress` with gzip.
- `amadeus.utils` – `join`, `hex_bytes_as_str`, `to_int`, `read_u16`,
  `read_u32` and `DecodeError`.
- `amadeus.appinfo` – `app_complete_name()` (`"Amadeus - music for you"`),
  `home_dir()` and `create_dirs(path)`.

`Value`, `Field`, `Row`, `Result` and `Query` have `to_bytes()`,
`from_bytes(data)` and `to_string()`. `from_bytes` returns the decoded object
together with the number of bytes consumed, and raises `DecodeError` when the
data is incomplete or malformed. `Query` and `Result` can also be written
gzip-compressed with `to_gzip_bytes()`; their `from_bytes` recognises the
compressed form by itself, and `from_gzip_bytes` accepts only that form.
`Value`, `Field` and `Row` also have `serialized_data(data)`, which describes
serialized bytes line by line for debugging.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Example

```python
from amadeus.database import Database
from amadeus.query import Query

db = Database.instance()
db.create(
    ":memory:",
    lambda d: d.exec("CREATE TABLE song (id INTEGER PRIMARY KEY, title TEXT)"),
)

row_id = db.insert("INSERT INTO song (title) VALUES (?)", "Requiem")
result = db.select("SELECT id, title FROM song WHERE id = ?", row_id)
print(result.to_string())

# Serialize a query and read it back.
query = Query("SELECT * FROM song WHERE title = ?", "Requiem")
data = query.to_gzip_bytes()
restored, consumed = Query.from_bytes(data)
assert restored == query and consumed == len(data)

db.close()
```

`Database.open(path)` opens an existing file and returns `False` if it
cannot; with `expected_success=True` it raises `DatabaseError` instead.
`Database.create(path, fn, overwrite=False)` creates the database, runs `fn`
on it, and closes it again and raises `DatabaseError` if `fn` returns `False`.

## Wire format

Every chunk begins with a one-byte marker and a little-endian `u32` size that
covers everything after it:

| marker | contents |
|--------|----------|
| `M` `I` `D` `S` `V` | value: null, i64, f64, UTF-8 text, raw bytes |
| `F` | field: `u16` name length, name, value |
| `R` | row: `u16` field count, fields |
| `T` | result: `u16` row count, rows |
| `Q` | query: `u16` command length, `u16` argument count, command, values |

A marker with its high bit set (`T | 0x80`, `Q | 0x80`) means that the body
after the size is gzip-compressed.

## What it does not do

This is a library only. It has no command to run and no user interface: it
does not play, catalogue or manage music, and it does not send the serialized
data anywhere. It defines no database schema of its own; the tables are
whatever the caller creates.