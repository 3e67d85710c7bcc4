"""
Pytest Configuration and Fixtures

This module provides shared fixtures for all tests.
"""
import os
import sys
import pytest
from unittest.mock import Mock

# Add backend to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from bili_backup import create_app
from bili_backup.extensions import db, session_manager
from bili_backup.config import TestingConfig
from bili_backup.services.client.credentials import Credential
from bili_backup.services.client.delay_manager import HumanDelay
from bili_backup.services.client.signer import Signer, SigningKeyPair
from bili_backup.services.client.transport import Transport
from bili_backup.utils.crypto import reset_crypto

IMG_KEY = '7cd084941338484aae1ad9425b84077c'
SUB_KEY = '4932caff0ff746eab6f01bf08b70ac45'
COOKIE = 'SESSDATA=sess123; bili_jct=csrf456; DedeUserID=10086'


def make_response(payload=None, status=200):
    """Build a mock requests.Response returning ``payload`` from json()."""
    response = Mock()
    response.status_code = status
    response.json.return_value = payload
    return response


def envelope(data=None, code=0, message='0'):
    return {'code': code, 'message': message, 'data': data}


@pytest.fixture(scope='session')
def app(tmp_path_factory):
    """Create application for testing."""
    backup_dir = str(tmp_path_factory.mktemp('backups'))

    class Config(TestingConfig):
        BACKUP_PATH = backup_dir

    app = create_app(Config)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create database session for testing."""
    with app.app_context():
        db.session.begin_nested()
        yield db.session
        db.session.rollback()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Run every test without API keys or an encryption key unless it sets them."""
    for name in ('API_KEY', 'ADMIN_API_KEY', 'COOKIE_ENCRYPTION_KEY'):
        monkeypatch.delenv(name, raising=False)
    reset_crypto()
    yield
    reset_crypto()
    session_manager.transport.clear()


@pytest.fixture
def credential():
    return Credential.from_cookie(COOKIE)


@pytest.fixture
def signer():
    return Signer(SigningKeyPair(IMG_KEY, SUB_KEY), clock=lambda: 1702204169)


@pytest.fixture
def http_session():
    """A mocked requests.Session; set ``request.side_effect`` / ``return_value`` per test."""
    session = Mock()
    session.request.return_value = make_response(envelope({}))
    return session


@pytest.fixture
def sleeps():
    """Records every blocking sleep instead of sleeping."""
    return []


@pytest.fixture
def transport(http_session, sleeps):
    """Transport with a mocked session, no delays and no retry interval."""
    return Transport(
        max_concurrency=2,
        max_retries=3,
        retry_interval=0.5,
        timeout=5,
        delay=HumanDelay(0, 0, sleep=sleeps.append),
        session=http_session,
        sleep=sleeps.append,
    )


@pytest.fixture
def logged_in_transport(transport, credential, signer):
    transport.set_credential(credential)
    transport.set_signer(signer)
    return transport


class FakeClient:
    """Stands in for ApiClient: answers GETs from a queue and records everything."""

    def __init__(self, pages=None, account_id='10086'):
        self.pages = list(pages or [])
        self.account_id = account_id
        self.gets = []
        self.posts = []
        self.humanized = 0

    def get(self, url, params=None, signed=False):
        self.gets.append((url, dict(params or {}), signed))
        if not self.pages:
            raise AssertionError(f'unexpected GET {url}')
        page = self.pages.pop(0)
        if isinstance(page, Exception):
            raise page
        return page

    def post(self, url, data=None):
        self.posts.append((url, dict(data or {})))
        return {}

    def humanize(self):
        self.humanized += 1
        return 0.0


@pytest.fixture
def fake_client():
    return FakeClient


@pytest.fixture
def sample_relations():
    """Backed-up following relations, two of them in groups."""
    return [
        {'mid': 1, 'uname': 'alice', 'tag': [11], 'tag_names': ['游戏']},
        {'mid': 2, 'uname': 'bob', 'tag': [11, 12], 'tag_names': ['游戏', '音乐']},
        {'mid': 3, 'uname': 'carol', 'tag': None, 'tag_names': []},
        {'mid': 4, 'uname': 'dave', 'tag': [], 'tag_names': []},
        {'mid': 5, 'uname': 'erin', 'tag': [12], 'tag_names': ['音乐']},
    ]
