import pytest
from loguru import logger

from longbow_labels.longbow import Longbow


class FakeResponse:
    def __init__(self, status_code: int = 200, text: str = '') -> None:
        self.status_code = status_code
        self.text = text


class FakeSession:
    """Stands in for `requests.Session`, answering with queued responses and recording every call."""

    def __init__(self, get_responses=(), post_responses=()) -> None:
        self.get_responses = list(get_responses)
        self.post_responses = list(post_responses)
        self.get_calls = []
        self.post_calls = []

    def get(self, url, **kwargs):
        self.get_calls.append((url, kwargs))
        response = self.get_responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def post(self, url, **kwargs):
        self.post_calls.append((url, kwargs))
        response = self.post_responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logger.remove()


@pytest.fixture
def isolated_env(tmp_path, monkeypatch):
    """Run without any config file or credentials from the developer's machine."""

    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv('HOME', str(tmp_path))
    for env_var in ('LONGBOW_API_KEY', 'KEY', 'LONGBOW_TENANT_ID'):
        monkeypatch.delenv(env_var, raising=False)

    return tmp_path


@pytest.fixture
def make_client():
    def _make_client(get_responses=(), post_responses=()):
        session = FakeSession(get_responses, post_responses)
        client = Longbow('https://api.example.com', 'con_test', 'lb-secret', timeout=5, session=session)
        return client, session

    return _make_client
