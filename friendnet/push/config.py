"""Flask configuration for the Fanout Dispatcher."""

import os

PORT = int(os.environ.get('PUSH_PORT', '34574'))

LOGFILE = os.environ.get('LOGFILE')
LOGLEVEL = os.environ.get('LOGLEVEL', 20)

GATEWAY_ENDPOINT = os.environ.get('GATEWAY_ENDPOINT',
                                  'http://localhost:34568/')
SERVICE_TIMEOUT = os.environ.get('SERVICE_TIMEOUT', '30')
