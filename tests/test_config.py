"""
Tests for license settings loaded from the environment
"""

import logging
import os
import unittest

from pydantic import ValidationError

from adlicense.config import LicenseSettings

ENV_VARS = ("ADLICENSE_LICENSE", "ADLICENSE_ALLOW_DEBUG_KEY", "ADLICENSE_LOG_LEVEL")


class TestLicenseSettings(unittest.TestCase):
    """Settings come from ADLICENSE_* variables, never from shared state."""

    def setUp(self):
        """Save and clear the license environment variables."""
        self.original_env = {name: os.environ.get(name) for name in ENV_VARS}
        for name in ENV_VARS:
            os.environ.pop(name, None)

    def tearDown(self):
        """Restore the original environment."""
        for name, value in self.original_env.items():
            if value is None:
                os.environ.pop(name, None)
            else:
                os.environ[name] = value

    def test_defaults(self):
        """Test the settings defaults."""
        settings = LicenseSettings(_env_file=None)
        self.assertIsNone(settings.license)
        self.assertFalse(settings.allow_debug_key)
        self.assertEqual(settings.log_level, "INFO")
        self.assertEqual(settings.log_level_value, logging.INFO)

    def test_reads_environment(self):
        """Test that ADLICENSE_* variables are read."""
        os.environ["ADLICENSE_LICENSE"] = "PC2abc"
        os.environ["ADLICENSE_ALLOW_DEBUG_KEY"] = "true"
        os.environ["ADLICENSE_LOG_LEVEL"] = "debug"

        settings = LicenseSettings(_env_file=None)
        self.assertEqual(settings.license, "PC2abc")
        self.assertTrue(settings.allow_debug_key)
        self.assertEqual(settings.log_level, "DEBUG")
        self.assertEqual(settings.log_level_value, logging.DEBUG)

    def test_each_instance_reads_environment(self):
        """Test that each instance reads the environment afresh."""
        first = LicenseSettings(_env_file=None)
        os.environ["ADLICENSE_LICENSE"] = "later"
        second = LicenseSettings(_env_file=None)
        self.assertIsNone(first.license)
        self.assertEqual(second.license, "later")

    def test_explicit_values_win(self):
        """Test that explicit values override the environment."""
        os.environ["ADLICENSE_LICENSE"] = "from-env"
        settings = LicenseSettings(license="explicit", _env_file=None)
        self.assertEqual(settings.license, "explicit")

    def test_unknown_log_level_rejected(self):
        """Test that an unknown log level is rejected."""
        with self.assertRaises(ValidationError):
            LicenseSettings(log_level="LOUD", _env_file=None)


if __name__ == "__main__":
    unittest.main()
