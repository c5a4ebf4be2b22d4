"""
Run script for starting the Voice Gateway server.

Usage:
    voice-gateway [--port PORT] [--host HOST] [--log-level LEVEL]
    python -m voice_gateway.run [--port PORT] [--host HOST]
"""

import argparse
import os
import sys
from pathlib import Path

import dotenv
import uvicorn

from voice_gateway.config.logging_config import configure_logging
from voice_gateway.config.settings import load_agent_credentials, load_speech_settings
from voice_gateway.errors import ConfigError


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Start the Voice Gateway server"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.getenv("PORT", "8000")),
        help="Port to run the server on (default: 8000 or PORT env var)",
    )
    parser.add_argument(
        "--host",
        default=os.getenv("HOST", "0.0.0.0"),
        help="Host to bind the server to (default: 0.0.0.0 or HOST env var)",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", "INFO").upper(),
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO or LOG_LEVEL env var)",
    )
    return parser.parse_args(argv)


def report_configuration(logger) -> bool:
    """Log which integrations are configured. Returns False if neither is."""
    configured = False
    for name, loader in (("Agent", load_agent_credentials), ("Speech", load_speech_settings)):
        try:
            loader(os.environ)
        except ConfigError as e:
            logger.warning(f"{name} integration unavailable: {e}")
        else:
            logger.info(f"{name} integration configured")
            configured = True
    return configured


def main(argv=None):
    """Main entry point for starting the server."""
    env_path = Path(".") / ".env"
    if env_path.exists():
        dotenv.load_dotenv(env_path)

    args = parse_args(argv)
    logger = configure_logging(args.log_level)

    if not report_configuration(logger):
        logger.error("No integration is configured; set the AGENT_* or OPENAI_API_KEY environment variables")
        sys.exit(1)

    logger.info(f"Starting server on http://{args.host}:{args.port}")
    logger.info(f"Log level: {args.log_level}")

    uvicorn.run(
        "voice_gateway.main:app",
        host=args.host,
        port=args.port,
        log_level=args.log_level.lower(),
        access_log=False,
        # Reload on code changes during development
        reload=os.getenv("ENV", "production").lower() == "development",
    )


if __name__ == "__main__":
    main()
