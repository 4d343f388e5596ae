"""Domain layer (pure logic).

- Keep campaign/election rules and calculations here.
- Avoid I/O: no DB sessions, no HTTP/FastAPI, no Redis.
- Deterministic functions only: `now` (epoch seconds) is always passed in,
  and every "random" decision is derived from hash_source.
"""
