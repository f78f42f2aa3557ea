"""
End-to-end tests across all four services.

The services talk to each other with :mod:`requests`. Here each outgoing
request is routed to the test client of the app that owns the endpoint, so
the whole protocol runs in one process. The gateway and issuer share one
SQLite database.
"""

import os
import tempfile
from http import HTTPStatus
from typing import Any, Dict
from unittest import TestCase, mock
from urllib.parse import urlsplit

import requests
from flask import Flask
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict

from friendnet import storage
from friendnet.gateway.factory import create_app as create_gateway_app
from friendnet.issuer.factory import create_app as create_issuer_app
from friendnet.push.factory import create_app as create_push_app
from friendnet.users.factory import create_app as create_users_app

Session = requests.Session

GATEWAY = 'gateway.local'
ISSUER = 'issuer.local'
USERS = 'users.local'
PUSH = 'push.local'


class FlaskAdapter(BaseAdapter):
    """Sends requests to Flask test clients, chosen by host."""

    def __init__(self, apps: Dict[str, Flask]) -> None:
        super(FlaskAdapter, self).__init__()
        self.apps = apps

    def send(self, request: requests.PreparedRequest, stream: bool = False,
             timeout: Any = None, verify: Any = True, cert: Any = None,
             proxies: Any = None) -> requests.Response:
        url = urlsplit(request.url)
        if url.netloc not in self.apps:
            raise requests.exceptions.ConnectionError(f'No {url.netloc}')
        headers = {}
        if 'Content-Type' in request.headers:
            headers['Content-Type'] = request.headers['Content-Type']
        client = self.apps[url.netloc].test_client()
        # The path keeps its quoting, as a WSGI server would pass it on.
        resp = client.open(url.path, method=request.method,
                           data=request.body, headers=headers,
                           environ_overrides={'RAW_URI': url.path})

        response = requests.Response()
        response.status_code = resp.status_code
        response.headers = CaseInsensitiveDict(resp.headers)
        response._content = resp.get_data()
        response.url = request.url
        response.request = request
        return response

    def close(self) -> None:
        pass


class TestFriendNetwork(TestCase):
    """Users sign on, make friends, and share their status."""

    def setUp(self):
        """Start all four services and add Alice and Bob."""
        self.db_fd, self.db_path = tempfile.mkstemp(suffix='.db')
        self.env = mock.patch.dict(os.environ, {
            'SQLALCHEMY_DATABASE_URI': f'sqlite:///{self.db_path}',
            'STORAGE_ACCOUNT_KEY': 'foosecret',
            'CREATE_DB': '1'
        })
        self.env.start()

        self.gateway_app = create_gateway_app()
        self.issuer_app = create_issuer_app()
        self.users_app = create_users_app()
        self.push_app = create_push_app()
        for app in (self.users_app, self.push_app):
            app.config['GATEWAY_ENDPOINT'] = f'http://{GATEWAY}/'
            app.config['ISSUER_ENDPOINT'] = f'http://{ISSUER}/'
            app.config['PUSH_ENDPOINT'] = f'http://{PUSH}/'
        self.apps = {
            GATEWAY: self.gateway_app,
            ISSUER: self.issuer_app,
            USERS: self.users_app,
            PUSH: self.push_app
        }

        def new_session() -> requests.Session:
            session = Session()
            session.mount('http://', FlaskAdapter(self.apps))
            return session

        self.transport = mock.patch(
            'friendnet.services.util.requests.Session',
            side_effect=new_session
        )
        self.transport.start()

        self.gateway = self.gateway_app.test_client()
        self.issuer = self.issuer_app.test_client()
        self.users = self.users_app.test_client()

        for table in ('AuthTable', 'DataTable'):
            self.gateway.post(f'/CreateTableAdmin/{table}')
        self.add_user('alice', 'secret', 'US', 'Alice,A')
        self.add_user('bob', 'hunter', 'CA', 'Bob,B')

    def tearDown(self):
        """Stop routing requests and remove the database."""
        self.transport.stop()
        with self.gateway_app.app_context():
            storage.drop_all()
        self.env.stop()
        os.close(self.db_fd)
        os.remove(self.db_path)

    def add_user(self, userid, password, partition, row):
        """Add a credential and an empty data entity."""
        self.gateway.put(f'/UpdateEntityAdmin/AuthTable/Userid/{userid}',
                         json={'Password': password,
                               'DataPartition': partition,
                               'DataRow': row})
        self.gateway.put(f'/UpdateEntityAdmin/DataTable/{partition}/{row}',
                         json={'Friends': '', 'Status': '', 'Updates': ''})

    def read_entity(self, partition, row):
        """Read a data entity with the admin interface."""
        response = self.gateway.get(
            f'/ReadEntityAdmin/DataTable/{partition}/{row}'
        )
        self.assertEqual(response.status_code, HTTPStatus.OK)
        return response.get_json()

    def put_raw(self, path):
        """PUT to the Session Manager, keeping the quoting of ``path``."""
        return self.users.put(path, environ_overrides={'RAW_URI': path})

    def test_scenario(self):
        """Alice befriends Bob, and Bob sees her status."""
        response = self.users.post('/SignOn/alice',
                                   json={'Password': 'secret'})
        self.assertEqual(response.status_code, HTTPStatus.OK)

        response = self.users.put('/AddFriend/alice/CA/Bob,B')
        self.assertEqual(response.status_code, HTTPStatus.OK)
        response = self.users.get('/ReadFriendList/alice')
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(response.get_json(), {'Friends': 'CA;Bob,B'})

        response = self.users.put('/UpdateStatus/alice/hi')
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(response.get_json(),
                         {'attempted': 1, 'delivered': 1, 'failed': []})
        self.assertEqual(self.read_entity('CA', 'Bob,B')['Updates'], 'hi\n')
        alice = self.read_entity('US', 'Alice,A')
        self.assertEqual(alice['Status'], 'hi')
        self.assertEqual(alice['Updates'], 'hi\n')

        response = self.users.post('/SignOff/alice')
        self.assertEqual(response.status_code, HTTPStatus.OK)
        response = self.users.get('/ReadFriendList/alice')
        self.assertEqual(response.status_code, HTTPStatus.FORBIDDEN)

    def test_sign_on_is_idempotent(self):
        """Signing on twice leaves one session."""
        for _ in range(2):
            response = self.users.post('/SignOn/alice',
                                       json={'Password': 'secret'})
            self.assertEqual(response.status_code, HTTPStatus.OK)
        response = self.users.get('/ActiveUsers')
        self.assertEqual(response.get_json(), {'users': ['alice']})

    def test_sign_on_refused(self):
        """Unknown users, bad passwords and odd userids are not found."""
        for userid, password in [('carol', 'secret'), ('alice', 'wrong'),
                                 ('alice1', 'secret')]:
            response = self.users.post(f'/SignOn/{userid}',
                                       json={'Password': password})
            self.assertEqual(response.status_code, HTTPStatus.NOT_FOUND)
        response = self.users.get('/ActiveUsers')
        self.assertEqual(response.get_json(), {'users': []})

    def test_friends_are_a_set_on_the_way_in(self):
        """Adding a friend twice, or removing a stranger, changes nothing."""
        self.users.post('/SignOn/alice', json={'Password': 'secret'})
        self.users.put('/AddFriend/alice/CA/Bob,B')
        response = self.users.put('/AddFriend/alice/CA/Bob,B')
        self.assertEqual(response.status_code, HTTPStatus.OK)
        response = self.users.put('/UnFriend/alice/US/Nobody,N')
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(self.read_entity('US', 'Alice,A')['Friends'],
                         'CA;Bob,B')

        response = self.users.put('/UnFriend/alice/CA/Bob,B')
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(self.read_entity('US', 'Alice,A')['Friends'], '')

    def test_missing_friend_is_reported(self):
        """A friend without a data entity is skipped by the fanout."""
        self.users.post('/SignOn/alice', json={'Password': 'secret'})
        self.users.put('/AddFriend/alice/XX/Ghost,G')
        self.users.put('/AddFriend/alice/CA/Bob,B')
        response = self.users.put('/UpdateStatus/alice/hi')
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(response.get_json(), {
            'attempted': 2, 'delivered': 1, 'failed': ['XX;Ghost,G']
        })
        self.assertEqual(self.read_entity('CA', 'Bob,B')['Updates'], 'hi\n')
        response = self.gateway.get('/ReadEntityAdmin/DataTable/XX/Ghost,G')
        self.assertEqual(response.status_code, HTTPStatus.NOT_FOUND)

    def test_dispatcher_unreachable(self):
        """If the dispatcher is down, the status update is unavailable."""
        del self.apps[PUSH]
        self.users.post('/SignOn/alice', json={'Password': 'secret'})
        response = self.users.put('/UpdateStatus/alice/hi')
        self.assertEqual(response.status_code, HTTPStatus.SERVICE_UNAVAILABLE)

    def test_token_for_another_user(self):
        """Alice's token is forbidden on Bob's entity."""
        response = self.issuer.get('/GetUpdateData/alice',
                                   json={'Password': 'secret'})
        token = response.get_json()['token']

        response = self.gateway.get(
            f'/ReadEntityAuth/DataTable/{token}/US/Alice,A'
        )
        self.assertEqual(response.status_code, HTTPStatus.OK)
        response = self.gateway.get(
            f'/ReadEntityAuth/DataTable/{token}/CA/Bob,B'
        )
        self.assertEqual(response.status_code, HTTPStatus.FORBIDDEN)
        response = self.gateway.put(
            f'/UpdateEntityAuth/DataTable/{token}/CA/Bob,B',
            json={'Status': 'pwned'}
        )
        self.assertEqual(response.status_code, HTTPStatus.FORBIDDEN)
        self.assertEqual(self.read_entity('CA', 'Bob,B')['Status'], '')

    def test_wildcard_friend(self):
        """A friend row of ``*`` fails alone; later friends still get it."""
        self.users.post('/SignOn/alice', json={'Password': 'secret'})
        self.users.put('/AddFriend/alice/CA/*')
        self.users.put('/AddFriend/alice/CA/Bob,B')
        response = self.users.put('/UpdateStatus/alice/hi')
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(response.get_json(), {
            'attempted': 2, 'delivered': 1, 'failed': ['CA;*']
        })
        self.assertEqual(self.read_entity('CA', 'Bob,B')['Updates'], 'hi\n')

    def test_quoted_slash_in_friend(self):
        """A quoted slash stays in the friend's name."""
        self.users.post('/SignOn/alice', json={'Password': 'secret'})
        response = self.put_raw('/AddFriend/alice/CA/Bob%2FB')
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(self.read_entity('US', 'Alice,A')['Friends'],
                         'CA;Bob/B')
        response = self.put_raw('/AddFriend/alice/CA/Bob/B')
        self.assertEqual(response.status_code, HTTPStatus.BAD_REQUEST)
        self.assertEqual(self.read_entity('US', 'Alice,A')['Friends'],
                         'CA;Bob/B')

    def test_quoted_slashes_in_status(self):
        """Doubled and trailing slashes in a status reach every reader."""
        self.users.post('/SignOn/alice', json={'Password': 'secret'})
        self.users.put('/AddFriend/alice/CA/Bob,B')
        response = self.put_raw('/UpdateStatus/alice/a%2F%2Fb%2F')
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(response.get_json()['delivered'], 1)
        self.assertEqual(self.read_entity('US', 'Alice,A')['Status'],
                         'a//b/')
        self.assertEqual(self.read_entity('CA', 'Bob,B')['Updates'],
                         'a//b/\n')

    def test_sign_off_leaves_no_locks(self):
        """Once requests finish, no user lock is left behind."""
        self.users.post('/SignOn/alice', json={'Password': 'secret'})
        self.users.put('/UpdateStatus/alice/hi')
        self.users.post('/SignOff/alice')
        self.users.get('/ReadFriendList/carol')
        self.users.post('/SignOff/carol')
        store = self.users_app.extensions['friendnet.sessions']
        self.assertEqual(store.locked_users(), [])
