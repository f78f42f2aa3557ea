"""
Backend services for a small social network.

Four Flask services cooperate over HTTP:

- :mod:`friendnet.issuer` checks credentials and mints capability tokens
  scoped to a single entity of the data table.
- :mod:`friendnet.gateway` is a CRUD surface over table storage; its
  token-gated operations hand the caller's token to storage for validation.
- :mod:`friendnet.users` tracks which users are signed on, and maintains their
  friend lists and statuses through the gateway.
- :mod:`friendnet.push` appends a status update to the update log of each of
  a user's friends.

All durable data lives in :mod:`friendnet.storage`.
"""
