import logging
import unittest

from skoolresults.config.logging_setup import PACKAGE_LOGGER, configure_logging
from skoolresults.config.settings import Settings, _split_csv, _to_int
from skoolresults.services.report_service import ReportService


class SettingsTests(unittest.TestCase):
    def test_split_csv(self):
        self.assertEqual(_split_csv(" general studies, ,GS "), ("general studies", "GS"))
        self.assertEqual(_split_csv(""), ())

    def test_to_int(self):
        self.assertEqual(_to_int("12", 256), 12)
        self.assertEqual(_to_int("lots", 256), 256)

    def test_settings_are_immutable(self):
        with self.assertRaises(Exception):
            Settings().ranking_method = "dense"

    def test_configure_logging_is_idempotent(self):
        logger = logging.getLogger(PACKAGE_LOGGER)
        before = len(logger.handlers)

        configure_logging("debug")
        configure_logging("warning")

        self.assertLessEqual(len(logger.handlers) - before, 1)
        self.assertEqual(logger.level, logging.WARNING)

        configure_logging()
        self.assertEqual(len(logger.handlers), len(set(logger.handlers)))

    def test_service_construction_leaves_handlers_alone(self):
        logger = logging.getLogger(PACKAGE_LOGGER)
        before = list(logger.handlers)

        ReportService.from_settings()

        self.assertEqual(logger.handlers, before)


if __name__ == "__main__":
    unittest.main()
