"""Flask configuration for the Token Issuer."""

import os

PORT = int(os.environ.get('ISSUER_PORT', '34570'))

LOGFILE = os.environ.get('LOGFILE')
LOGLEVEL = os.environ.get('LOGLEVEL', 20)

SQLALCHEMY_DATABASE_URI = os.environ.get(
    'SQLALCHEMY_DATABASE_URI',
    f'sqlite:///{os.path.abspath("friendnet.db")}'
)
SQLALCHEMY_TRACK_MODIFICATIONS = False
CREATE_DB = bool(int(os.environ.get('CREATE_DB', 0)))

STORAGE_ACCOUNT_KEY = os.environ.get('STORAGE_ACCOUNT_KEY', 'foosecret')

TOKEN_DURATION = os.environ.get('TOKEN_DURATION', '86400')
"""Lifetime of an issued token, in seconds."""
