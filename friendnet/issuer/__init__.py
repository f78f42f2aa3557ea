"""
Token Issuer.

Checks a user's password against the credential table and hands back a
short-lived access token for the user's data entity.
"""
