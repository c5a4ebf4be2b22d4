"""
Voice Gateway - server-side bridge from a voice assistant to speech and agent APIs

This application lets a browser-based voice assistant use two external AI services
without ever holding their credentials:

- a speech provider (OpenAI compatible) for transcription, chat completion and
  text-to-speech
- a conversational agent platform reached with an OAuth2 client-credentials token
  and a per-conversation session

Architecture Overview:
- FastAPI server exposing JSON endpoints for the front end
- Stateless speech and chat clients, one request per call
- An agent client that keeps a token and session per conversation and recovers
  from expired tokens (401) and expired sessions (404) on its own

Key Components:
- config: Constants, logging setup and the cached credential stores
- models: Pydantic schemas for the vendor APIs and the gateway API, result objects
- services: Clients for the vendor APIs and the per-conversation state store
- main: The FastAPI application

Getting Started:
1. Set up environment variables (or a .env file):
   - OPENAI_API_KEY: API key of the speech provider
   - AGENT_SERVER_HOST, AGENT_CLIENT_ID, AGENT_CLIENT_SECRET, AGENT_ID: agent platform
   - PORT / HOST / LOG_LEVEL: server options

2. Start the server:
   ```bash
   voice-gateway --port 8000
   ```
"""
