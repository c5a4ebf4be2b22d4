import json
import logging
import threading
from collections import deque
from http.client import responses as REASONS
from typing import Any, Dict, NamedTuple, Optional

import pytest
import requests

from voice_gateway.config.settings import (
    CredentialStore,
    load_agent_credentials,
    load_speech_settings,
)
from voice_gateway.models.agent_schemas import AuthToken, Session
from voice_gateway.services.conversation_store import ConversationStore

SERVER_HOST = "acme.my.salesforce.com"
INSTANCE_URL = "https://acme.my.salesforce.com"
AGENT_ID = "0XxAGENT0001"
API_BASE = "https://api.salesforce.com/einstein/ai-agent/v1"
ALT_BASE = f"{INSTANCE_URL}/services/data/v59.0/einstein/ai-agent"

TOKEN_URL = f"https://{SERVER_HOST}/services/oauth2/token"
PRIMARY_SESSIONS_URL = f"{API_BASE}/agents/{AGENT_ID}/sessions"
ALT_SESSIONS_URL = f"{ALT_BASE}/agents/{AGENT_ID}/sessions"

AGENT_ENV = {
    "AGENT_SERVER_HOST": f"https://{SERVER_HOST}/",
    "AGENT_CLIENT_ID": "client-id",
    "AGENT_CLIENT_SECRET": "client-secret",
    "AGENT_ID": AGENT_ID,
    "AGENT_ORG_ID": "00Dxx0000001",
}

SPEECH_ENV = {
    "OPENAI_API_KEY": "sk-test",
    "SPEECH_BASE_URL": "https://speech.example.com/v1/",
}


def primary_messages_url(session_id: str) -> str:
    return f"{API_BASE}/sessions/{session_id}/messages"


def alt_messages_url(session_id: str) -> str:
    return f"{ALT_BASE}/sessions/{session_id}/messages"


def build_response(
    status_code: int = 200,
    json_body: Any = None,
    content: Optional[bytes] = None,
    headers: Optional[Dict[str, str]] = None,
) -> requests.Response:
    """Build a real requests.Response without touching the network."""
    response = requests.Response()
    response.status_code = status_code
    response.reason = REASONS.get(status_code, "")
    if json_body is not None:
        response._content = json.dumps(json_body).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    else:
        response._content = content or b""
    response.headers.update(headers or {})
    response.encoding = "utf-8"
    return response


class RecordedCall(NamedTuple):
    method: str
    url: str
    timeout: Optional[float]
    kwargs: Dict[str, Any]


class FakeHttp:
    """Stands in for requests.Session, answering each URL from its own queue."""

    def __init__(self):
        self.routes: Dict[str, deque] = {}
        self.calls = []
        self._lock = threading.Lock()

    def add(self, url: str, *responses):
        self.routes.setdefault(url, deque()).extend(responses)
        return self

    def _answer(self, method: str, url: str, timeout, kwargs):
        with self._lock:
            self.calls.append(RecordedCall(method, url, timeout, kwargs))
            queue = self.routes.get(url)
            if not queue:
                raise AssertionError(f"Unexpected {method} to {url}")
            item = queue.popleft()
        if isinstance(item, Exception):
            raise item
        return item

    def post(self, url, timeout=None, **kwargs):
        return self._answer("POST", url, timeout, kwargs)

    def get(self, url, timeout=None, **kwargs):
        return self._answer("GET", url, timeout, kwargs)

    def calls_to(self, url: str):
        return [c for c in self.calls if c.url == url]

    @property
    def urls(self):
        return [c.url for c in self.calls]


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging configuration before each test"""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    logging.basicConfig(level=logging.NOTSET)
    yield


@pytest.fixture
def make_response():
    return build_response


@pytest.fixture
def http():
    return FakeHttp()


@pytest.fixture
def agent_settings():
    return CredentialStore(load_agent_credentials, env=dict(AGENT_ENV))


@pytest.fixture
def credentials(agent_settings):
    return agent_settings.get()


@pytest.fixture
def speech_settings():
    return CredentialStore(load_speech_settings, env=dict(SPEECH_ENV))


@pytest.fixture
def conversation_store():
    return ConversationStore()


@pytest.fixture
def token():
    return AuthToken(access_token="token-1", instance_url=INSTANCE_URL)


@pytest.fixture
def token_ok():
    """Factory for a successful OAuth response."""

    def _token_ok(access_token: str = "token-1", instance_url: str = INSTANCE_URL):
        return build_response(
            200,
            {"access_token": access_token, "instance_url": instance_url, "token_type": "Bearer"},
        )

    return _token_ok


@pytest.fixture
def ready_state(conversation_store, token):
    """A conversation that already holds a token and an open session."""
    state = conversation_store.get("default")
    state.token = token
    state.session = Session(session_id="S1", sequence_id=1)
    return state
