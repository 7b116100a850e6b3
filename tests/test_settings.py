# tests/test_settings.py
import os
import unittest
from unittest.mock import patch

from pydantic import ValidationError

from config.settings import Settings
from pixelbridge_project import main


class TestSettings(unittest.TestCase):

    def test_credentials_are_mandatory(self):
        with patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(ValidationError) as cm:
                Settings(_env_file=None)
        missing = {err["loc"][0] for err in cm.exception.errors()}
        self.assertEqual(missing, {"FACEBOOK_PIXEL_ID", "FACEBOOK_ACCESS_TOKEN"})

    def test_empty_credentials_are_rejected(self):
        with self.assertRaises(ValidationError):
            Settings(_env_file=None, FACEBOOK_PIXEL_ID="", FACEBOOK_ACCESS_TOKEN="token")

    def test_loads_from_environment_with_defaults(self):
        env = {
            "FACEBOOK_PIXEL_ID": "42",
            "FACEBOOK_ACCESS_TOKEN": "token",
            "WEBHOOK_VERIFY_TOKEN": "secret",
            "TEST_EVENT_CODE": "TEST99",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = Settings(_env_file=None)

        self.assertEqual(settings.FACEBOOK_PIXEL_ID, "42")
        self.assertEqual(settings.WEBHOOK_VERIFY_TOKEN, "secret")
        self.assertEqual(settings.TEST_EVENT_CODE, "TEST99")
        self.assertEqual(settings.PORT, 3000)
        self.assertEqual(settings.RATE_LIMIT_MAX_REQUESTS, 100)
        self.assertEqual(settings.RATE_LIMIT_WINDOW_SECONDS, 900)
        self.assertEqual(settings.DEFAULT_CURRENCY, "BRL")
        self.assertEqual(settings.events_endpoint, "https://graph.facebook.com/v18.0/42/events")

    def test_settings_are_immutable(self):
        settings = Settings(_env_file=None, FACEBOOK_PIXEL_ID="42", FACEBOOK_ACCESS_TOKEN="token")
        with self.assertRaises(ValidationError):
            settings.FACEBOOK_PIXEL_ID = "43"

    def test_startup_exits_when_credentials_are_missing(self):
        def failing_settings():
            return Settings(_env_file=None)

        with patch.dict(os.environ, {}, clear=True), patch.object(main, "get_settings", failing_settings):
            with self.assertRaises(SystemExit) as cm:
                main.load_settings_or_exit()
        self.assertEqual(cm.exception.code, 1)


if __name__ == '__main__':
    unittest.main()
