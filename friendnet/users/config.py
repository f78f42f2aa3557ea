"""Flask configuration for the Session Manager."""

import os

PORT = int(os.environ.get('USERS_PORT', '34572'))

LOGFILE = os.environ.get('LOGFILE')
LOGLEVEL = os.environ.get('LOGLEVEL', 20)

GATEWAY_ENDPOINT = os.environ.get('GATEWAY_ENDPOINT',
                                  'http://localhost:34568/')
ISSUER_ENDPOINT = os.environ.get('ISSUER_ENDPOINT', 'http://localhost:34570/')
PUSH_ENDPOINT = os.environ.get('PUSH_ENDPOINT', 'http://localhost:34574/')

SERVICE_TIMEOUT = os.environ.get('SERVICE_TIMEOUT', '30')
"""Seconds to wait on another service before giving up."""
