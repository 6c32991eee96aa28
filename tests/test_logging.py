import io
import json
import unittest

from loguru import logger

from quizgate.core.logging import setup_logging

from fakes import make_settings


class SetupLoggingTest(unittest.TestCase):
    def tearDown(self):
        setup_logging(make_settings())

    def _emit(self, settings, message: str) -> str:
        sink = io.StringIO()
        setup_logging(settings, sink=sink)
        logger.warning(message)
        logger.complete()
        return sink.getvalue()

    def test_production_writes_json_lines(self):
        out = self._emit(make_settings(APP_ENV="production"), "vault unreachable")
        record = json.loads(out.strip().splitlines()[-1])
        self.assertEqual(record["record"]["message"], "vault unreachable")
        self.assertEqual(record["record"]["level"]["name"], "WARNING")

    def test_development_writes_plain_lines(self):
        out = self._emit(make_settings(APP_ENV="development"), "vault unreachable")
        self.assertIn("WARNING", out)
        self.assertIn("vault unreachable", out)
        with self.assertRaises(ValueError):
            json.loads(out.strip().splitlines()[-1])

    def test_level_from_settings(self):
        sink = io.StringIO()
        setup_logging(make_settings(LOG_LEVEL="ERROR"), sink=sink)
        logger.warning("dropped")
        logger.error("kept")
        logger.complete()
        self.assertNotIn("dropped", sink.getvalue())
        self.assertIn("kept", sink.getvalue())


if __name__ == "__main__":
    unittest.main()
