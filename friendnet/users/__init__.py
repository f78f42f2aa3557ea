"""
Session Manager.

Tracks which users are signed on, and acts on their friend lists and status
through the Data Gateway using each user's access token.
"""
