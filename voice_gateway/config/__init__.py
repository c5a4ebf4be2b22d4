"""
Configuration module for the voice gateway.

Key components:
- constants: Vendor URLs, API version, timeouts and defaults used across modules.
- logging_config: Console and rotating file logging for the ``voice_gateway`` logger.
- settings: Cached, environment-backed credential stores for the agent platform
  and the speech provider.

Usage examples:
```python
from voice_gateway.config.logging_config import configure_logging
logger = configure_logging()

from voice_gateway.config.settings import CredentialStore, load_agent_credentials
agent_settings = CredentialStore(load_agent_credentials)
credentials = agent_settings.get()  # raises ConfigError if not configured
```
"""
