import logging
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch
from utils.logging_config import QUIET_LOGGERS, setup_logging


class TestSetupLogging(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.log_dir = Path(self.tmp.name) / "logs"

    def tearDown(self):
        self.tmp.cleanup()

    def run_setup(self, level):
        with patch("utils.logging_config.logging.basicConfig") as basic_config:
            setup_logging(level, log_dir=self.log_dir)
        kwargs = basic_config.call_args.kwargs
        for handler in kwargs["handlers"]:
            handler.close()
        return kwargs

    def test_creates_log_dir_and_file_handler(self):
        kwargs = self.run_setup("debug")

        self.assertTrue(self.log_dir.is_dir())
        self.assertEqual(kwargs["level"], logging.DEBUG)
        file_handlers = [h for h in kwargs["handlers"] if isinstance(h, logging.FileHandler)]
        self.assertEqual(Path(file_handlers[0].baseFilename), self.log_dir / "bot.log")

    def test_unknown_level_falls_back_to_info(self):
        self.assertEqual(self.run_setup("verbose")["level"], logging.INFO)

    def test_library_loggers_quieted(self):
        self.run_setup("DEBUG")

        for name in QUIET_LOGGERS:
            self.assertEqual(logging.getLogger(name).level, logging.WARNING)


if __name__ == '__main__':
    unittest.main()
