from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from conftest import PRIMARY_SESSIONS_URL, TOKEN_URL, primary_messages_url
from voice_gateway import main
from voice_gateway.errors import AgentError, ConfigError, InvalidInputError, SpeechError
from voice_gateway.main import app
from voice_gateway.models.agent_schemas import AgentReply
from voice_gateway.models.result import OperationResult
from voice_gateway.models.speech_schemas import SynthesizedSpeech
from voice_gateway.services.agent_client import AgentClient

client = TestClient(app)


def test_health_check():
    """Test the health check endpoint returns correct response"""
    response = client.get("/health")
    assert response.status_code == 200

    response_json = response.json()
    assert response_json["status"] == "healthy"
    assert isinstance(response_json["agent_configured"], bool)
    assert isinstance(response_json["speech_configured"], bool)
    assert isinstance(response_json["active_conversations"], int)


def test_root_endpoint():
    """Test the root endpoint returns the correct API information"""
    response = client.get("/")
    assert response.status_code == 200

    response_json = response.json()
    assert response_json["name"] == "Voice Gateway"
    assert response_json["version"] == "1.0.0"
    assert "/api/agent/message" in response_json["endpoints"]
    assert "/health" in response_json["endpoints"]


def test_agent_client_shares_the_health_store():
    assert main.agent_client.store is main.conversation_store


def test_app_configuration():
    assert app.title == "Voice Gateway"
    route_paths = [route.path for route in app.routes]
    for path in ("/", "/health", "/api/transcribe", "/api/chat", "/api/speech", "/api/agent/message"):
        assert path in route_paths


class TestAgentMessage:
    def test_success(self):
        reply = AgentReply(agent_response="Hi!", next_sequence_id=2, session_id="S1")
        with patch.object(main, "agent_client") as agent_client:
            agent_client.send_message.return_value = OperationResult.ok(reply)

            response = client.post("/api/agent/message", json={"text": "hello", "conversationId": "caller-1"})

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "agentResponse": "Hi!",
            "nextSequenceId": 2,
            "sessionId": "S1",
        }
        agent_client.send_message.assert_called_once_with("hello", "caller-1")

    def test_default_conversation(self):
        with patch.object(main, "agent_client") as agent_client:
            agent_client.send_message.return_value = OperationResult.ok(
                AgentReply(agent_response="Hi!", next_sequence_id=2, session_id="S1")
            )
            client.post("/api/agent/message", json={"text": "hello", "conversationId": "  "})

        agent_client.send_message.assert_called_once_with("hello", "default")

    @pytest.mark.parametrize(
        "error, status_code",
        [
            (InvalidInputError("Message text is required"), 400),
            (ConfigError("Agent integration is not configured"), 503),
            (AgentError("Failed to send message to agent: primary: boom", 500), 502),
        ],
    )
    def test_errors_map_to_status_codes(self, error, status_code):
        with patch.object(main, "agent_client") as agent_client:
            agent_client.send_message.return_value = OperationResult.fail(error)

            response = client.post("/api/agent/message", json={"text": "hello"})

        assert response.status_code == status_code
        assert response.json() == {
            "success": False,
            "error": error.message,
            "errorType": type(error).__name__,
        }

    def test_end_to_end_with_fake_platform(self, http, agent_settings, conversation_store, token_ok, make_response):
        http.add(TOKEN_URL, token_ok())
        http.add(PRIMARY_SESSIONS_URL, make_response(201, {"sessionId": "S1"}))
        http.add(primary_messages_url("S1"), make_response(200, {"messages": [{"message": "Hello from the agent"}]}))
        agent_client = AgentClient(agent_settings, conversation_store, http=http)

        with patch.object(main, "agent_client", agent_client):
            response = client.post("/api/agent/message", json={"text": "hello"})

        assert response.json()["agentResponse"] == "Hello from the agent"
        assert response.json()["nextSequenceId"] == 2

    def test_reset_conversation(self):
        with patch.object(main, "agent_client") as agent_client:
            agent_client.reset.return_value = True

            response = client.delete("/api/agent/conversations/caller-1")

        assert response.json() == {"success": True, "existed": True}
        agent_client.reset.assert_called_once_with("caller-1")


class TestSpeechEndpoints:
    def test_transcribe(self):
        with patch.object(main, "speech_client") as speech_client:
            speech_client.transcribe.return_value = OperationResult.ok("hello world")

            response = client.post("/api/transcribe", json={"audioData": "data:audio/webm;base64,AAAA"})

        assert response.json() == {"success": True, "text": "hello world"}
        speech_client.transcribe.assert_called_once_with("data:audio/webm;base64,AAAA", None)

    def test_transcribe_provider_error(self):
        with patch.object(main, "speech_client") as speech_client:
            speech_client.transcribe.return_value = OperationResult.fail(SpeechError("Transcription failed: bad", 400))

            response = client.post("/api/transcribe", json={"audioData": "AAAA"})

        assert response.status_code == 502
        assert response.json()["errorType"] == "SpeechError"

    def test_chat(self):
        with patch.object(main, "chat_client") as chat_client:
            chat_client.complete.return_value = OperationResult.ok("Sure.")

            response = client.post(
                "/api/chat",
                json={"messages": [{"role": "user", "content": "Hi"}], "maxTokens": 50},
            )

        assert response.json() == {"success": True, "content": "Sure."}
        messages, max_tokens = chat_client.complete.call_args.args
        assert messages[0].content == "Hi"
        assert max_tokens == 50

    def test_chat_rejects_unknown_role(self):
        response = client.post("/api/chat", json={"messages": [{"role": "robot", "content": "Hi"}]})

        assert response.status_code == 422

    def test_speech(self):
        audio = SynthesizedSpeech(content_type="audio/mpeg", data_uri="data:audio/mpeg;base64,AAAA", size=3)
        with patch.object(main, "speech_client") as speech_client:
            speech_client.synthesize.return_value = OperationResult.ok(audio)

            response = client.post("/api/speech", json={"text": "Hello", "voice": "nova"})

        assert response.json() == {
            "success": True,
            "audioData": "data:audio/mpeg;base64,AAAA",
            "contentType": "audio/mpeg",
        }
        speech_client.synthesize.assert_called_once_with("Hello", "nova")


class TestIntegrationsStatus:
    def test_reports_each_integration(self):
        with patch.object(main, "agent_settings") as agent_settings, \
                patch.object(main, "speech_settings") as speech_settings, \
                patch.object(main, "agent_client") as agent_client, \
                patch.object(main, "speech_client") as speech_client:
            agent_settings.is_configured.return_value = True
            speech_settings.is_configured.return_value = False
            agent_client.check_connectivity.return_value = OperationResult.fail(
                ConfigError("Authentication failed: invalid_client")
            )

            response = client.get("/api/integrations/status")

        assert response.json() == {
            "integrations": {
                "agent": {"configured": True, "reachable": False, "error": "Authentication failed: invalid_client"},
                "speech": {"configured": False, "reachable": False, "error": None},
            }
        }
        speech_client.check_connectivity.assert_not_called()
