import pytest
from fastapi.testclient import TestClient

from mdwrangler.config import Settings
from mdwrangler.security.csrf import CsrfSecret, issue_token

TEST_SECRET = CsrfSecret(b"test_secret_key_for_csrf_testing")


@pytest.fixture
def content_dir(tmp_path):
    root = tmp_path / "site"
    root.mkdir()
    return root


@pytest.fixture
def client(content_dir):
    from mdwrangler.main import create_app

    app = create_app(Settings(target_dir=content_dir), csrf_secret=TEST_SECRET)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def csrf_secret():
    return TEST_SECRET


@pytest.fixture
def csrf_token(csrf_secret):
    return issue_token(csrf_secret)
