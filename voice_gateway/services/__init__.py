"""
Services module for the vendor API integrations of the voice gateway.

Key components:
- agent_client: Sends user messages into agent sessions, recovering from expired
  tokens and sessions.
- session_manager: Opens agent sessions over the primary/alternate endpoints.
- token_authenticator: OAuth2 client-credentials exchange.
- conversation_store: Per-conversation token/session state with per-key locks.
- speech_client / chat_client: One-shot transcription, TTS and chat calls.

Usage examples:
```python
from voice_gateway.config.settings import CredentialStore, load_agent_credentials
from voice_gateway.services.agent_client import AgentClient

client = AgentClient(CredentialStore(load_agent_credentials))
result = client.send_message("hello", conversation_key="caller-42")
if result.success:
    print(result.value.agent_response, result.value.next_sequence_id)
else:
    print(result.error_message)
```
"""
