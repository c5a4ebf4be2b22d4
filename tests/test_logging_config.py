import unittest
import logging
from logging.handlers import RotatingFileHandler
from unittest.mock import patch

from voice_gateway.config import logging_config
from voice_gateway.config.logging_config import configure_logging


class TestLoggingConfig(unittest.TestCase):
    def test_configure_logging(self):
        logger = configure_logging(log_to_file=False)
        self.assertIsInstance(logger, logging.Logger)

        self.assertEqual(logger.name, "voice_gateway")
        self.assertEqual(logger.level, logging.INFO)
        self.assertFalse(logger.propagate)

        self.assertEqual(len(logger.handlers), 1)
        handler = logger.handlers[0]
        self.assertIsInstance(handler, logging.StreamHandler)
        formatter = handler.formatter
        self.assertEqual(formatter._fmt, "%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    def test_reconfiguring_does_not_stack_handlers(self):
        configure_logging("DEBUG", log_to_file=False)
        logger = configure_logging("DEBUG", log_to_file=False)

        self.assertEqual(len(logger.handlers), 1)
        self.assertEqual(logger.level, logging.DEBUG)

    def test_file_handler(self):
        import tempfile
        from pathlib import Path

        with tempfile.TemporaryDirectory() as tmp:
            log_dir = Path(tmp) / "logs"
            with patch.object(logging_config, "LOG_DIR", log_dir), \
                    patch.object(logging_config, "LOG_FILE", log_dir / "voice_gateway.log"):
                logger = configure_logging()

            file_handlers = [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]
            self.assertEqual(len(file_handlers), 1)
            self.assertTrue(log_dir.exists())
            for handler in file_handlers:
                handler.close()
            configure_logging(log_to_file=False)


if __name__ == "__main__":
    unittest.main()
