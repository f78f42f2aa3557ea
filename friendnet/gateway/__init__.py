"""
Data Gateway: a CRUD surface over table storage.

Administrative operations act with the gateway's own storage credentials.
The token-gated operations, ``ReadEntityAuth`` and ``UpdateEntityAuth``, act
only with the capability token in the request path: the gateway hands the
token to storage, which decides whether it grants the operation on the
requested entity. Other services (and tests) call those operations directly;
the gateway knows nothing about user sessions.
"""
