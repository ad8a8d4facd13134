# chirpy

A small microblogging HTTP API built on Flask. Users sign up with an e-mail
address and a password, log in, and post short messages called *chirps*.
Users and chirps are stored in an SQLite database.

A chirp body may be at most 140 bytes long once encoded as UTF-8. Before it
is stored, every space-separated word that is "kerfuffle", "sharbert" or
"fornax", in any case, is replaced with `****`.

The server also serves static files under `/app/` and counts how many
requests reach that path.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Running

```
chirpy [--port PORT] [--static-dir DIR]
```

- `--port`: the port to listen on (default `8080`), on all interfaces.
- `--static-dir`: the directory served under `/app/` (default: the working
  directory).

Settings come from the environment; a `.env` file in the working directory is
read first if it exists:

- `DB_URL`: the path of the SQLite database file (default `chirpy.db`). The
  `users` and `chirps` tables are created on start if they do not exist.
- `PLATFORM`: set it to `dev` to allow `POST /admin/reset`.

## Endpoints

| Method | Path                    | What it does                                              |
|--------|-------------------------|-----------------------------------------------------------|
| GET    | `/app/...`              | Serves a file, an `index.html` or a directory listing, and counts the request |
| GET    | `/admin/metrics`        | HTML page that shows the request count                    |
| POST   | `/admin/reset`          | Removes all users and sets the count to 0 (`dev` only, else 403) |
| GET    | `/api/healthz`          | Returns `OK` as plain text                                |
| POST   | `/api/users`            | Creates a user from `{"email": ..., "password": ...}`; 201 |
| POST   | `/api/login`            | Checks the credentials and returns the user; 401 `Unauthorized` on a wrong password |
| POST   | `/api/chirps`           | Creates a chirp from `{"body": ..., "user_id": ...}`; 201, or 400 if too long |
| GET    | `/api/chirps`           | Lists all chirps, oldest first                            |
| GET    | `/api/chirps/<chirpID>` | Returns one chirp; 400 for a malformed id, 404 if unknown |

Users come back as `id`, `created_at`, `updated_at` and `email`; chirps as
`id`, `created_at`, `updated_at`, `body` and `user_id`. Times are RFC 3339 in
UTC. Error messages come back as JSON of the form `{"error": "message"}`. A
request body that is not a JSON object with string fields gets an empty 500
response.

Example:

```
curl -X POST localhost:8080/api/users \
     -H 'Content-Type: application/json' \
     -d '{"email": "alice@example.com", "password": "password"}'
```

## Using it as a library

```python
from chirpy.database import Queries, connect
from chirpy.server import ApiConfig, clean_bad_words, create_app

queries = Queries(connect("chirpy.db"))
queries.create_schema()
app = create_app(ApiConfig(platform="dev", queries=queries), static_dir=".")

clean_bad_words("What a Kerfuffle")  # "What a ****"
```

- `chirpy.database`: `connect(path)` opens the SQLite file; `Queries` creates,
  fetches and removes `User` and `Chirp` records. Lookups that find nothing
  raise `NotFoundError`. `Queries.transaction()` is a context manager that
  commits on success and rolls back on an exception.
- `chirpy.auth`: `hash_password` and `check_password_hash` use bcrypt (the
  latter raises `ValueError` on a mismatch); `make_jwt` and `validate_jwt`
  issue and check HS256 tokens whose subject is a user id. `validate_jwt`
  raises `TokenError` for a bad signature, an expired token or a malformed
  subject.
- `chirpy.responses`: `respond_with_json` and `respond_with_error` build Flask
  JSON responses.

## What it does not do

- The HTTP endpoints do not issue or check tokens: login returns the user, and
  creating a chirp trusts the `user_id` in the request. The token helpers in
  `chirpy.auth` are there for callers to use.
- There is no endpoint to edit or delete single users or chirps, and
  `/admin/reset` removes users only, not chirps.
- Logging in with an unknown e-mail address gives a 500 response, not a 401.