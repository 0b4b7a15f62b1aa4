#!/usr/bin/env python3
"""
Config loading and validation tests.

Usage:
    python test_config_validator.py                    # Run the unit tests
    python test_config_validator.py config.yaml        # Validate a real config file
"""

import logging
import os
import sys
import tempfile
import textwrap
import unittest
from unittest import mock

from cutbot.api.models import RetryPolicy
from cutbot.config.loader import apply_env_overrides, get_config
from cutbot.config.models import DEFAULT_ADMIN_ROLES, ApiSettings, admin_ids, admin_roles
from cutbot.config.validator import ConfigValidationError, validate_config


def valid_config():
    return {
        "bot_token": "token",
        "client_id": 123,
        "guild_id": 456,
        "api": {
            "base_url": "http://localhost:3000/api/v1",
            "api_key": "secret",
            "timeout_ms": 5000,
            "retry": {"max_attempts": 3, "base_delay_ms": 1000},
        },
        "permissions": {
            "admin_roles": ["CUT Admin", "Moderator"],
            "users": {"admin_ids": [111]},
        },
        "log_level": "INFO",
    }


class TestValidateConfig(unittest.TestCase):
    def assertInvalid(self, cfg):
        with self.assertLogs("cutbot.config.validator", level="ERROR"):
            with self.assertRaises(ConfigValidationError):
                validate_config(cfg)

    def test_valid_config_passes(self):
        validate_config(valid_config())

    def test_minimal_config_passes(self):
        validate_config({"bot_token": "token", "api": {}})

    def test_missing_token(self):
        cfg = valid_config()
        del cfg["bot_token"]
        self.assertInvalid(cfg)

    def test_missing_api_section(self):
        cfg = valid_config()
        del cfg["api"]
        self.assertInvalid(cfg)

    def test_non_numeric_ids(self):
        for key in ("client_id", "guild_id"):
            with self.subTest(key=key):
                cfg = valid_config()
                cfg[key] = "not-a-number"
                self.assertInvalid(cfg)

    def test_bad_base_url(self):
        cfg = valid_config()
        cfg["api"]["base_url"] = "localhost:3000"
        self.assertInvalid(cfg)

    def test_bad_timeout(self):
        for value in (0, -5, "5000", True):
            with self.subTest(value=value):
                cfg = valid_config()
                cfg["api"]["timeout_ms"] = value
                self.assertInvalid(cfg)

    def test_bad_retry_policy(self):
        for retry in ({"max_attempts": 0}, {"base_delay_ms": -1}, {"max_attempts": "3"}, [3, 1000]):
            with self.subTest(retry=retry):
                cfg = valid_config()
                cfg["api"]["retry"] = retry
                self.assertInvalid(cfg)

    def test_zero_base_delay_is_allowed(self):
        cfg = valid_config()
        cfg["api"]["retry"] = {"max_attempts": 1, "base_delay_ms": 0}
        validate_config(cfg)

    def test_empty_api_key_only_warns(self):
        cfg = valid_config()
        cfg["api"]["api_key"] = ""
        with self.assertLogs("cutbot.config.validator", level="WARNING") as logs:
            validate_config(cfg)
        self.assertTrue(any("api_key" in line for line in logs.output))

    def test_bad_permissions(self):
        for perms in ({"admin_roles": "CUT Admin"}, {"users": {"admin_ids": "111"}}, {"users": {"admin_ids": ["111"]}}):
            with self.subTest(perms=perms):
                cfg = valid_config()
                cfg["permissions"] = perms
                self.assertInvalid(cfg)

    def test_bad_log_level(self):
        cfg = valid_config()
        cfg["log_level"] = "LOUD"
        self.assertInvalid(cfg)

    def test_lowercase_log_level_is_accepted(self):
        cfg = valid_config()
        cfg["log_level"] = "debug"
        validate_config(cfg)


class TestEnvOverrides(unittest.TestCase):
    def test_overrides_are_cast_and_nested(self):
        cfg = apply_env_overrides({"bot_token": "file"}, {
            "DISCORD_TOKEN": "env-token",
            "DISCORD_GUILD_ID": "789",
            "API_BASE_URL": "https://ladder.example/api/v1",
            "API_KEY": "k",
            "API_TIMEOUT": "2500",
        })

        self.assertEqual(cfg["bot_token"], "env-token")
        self.assertEqual(cfg["guild_id"], 789)
        self.assertEqual(cfg["api"], {
            "base_url": "https://ladder.example/api/v1",
            "api_key": "k",
            "timeout_ms": 2500,
        })

    def test_empty_values_are_ignored(self):
        cfg = apply_env_overrides({"api": {"api_key": "from-file"}}, {"API_KEY": ""})

        self.assertEqual(cfg["api"]["api_key"], "from-file")

    def test_uncastable_value_is_kept_for_validation(self):
        cfg = apply_env_overrides({"bot_token": "t", "api": {}}, {"API_TIMEOUT": "soon"})

        self.assertEqual(cfg["api"]["timeout_ms"], "soon")
        with self.assertLogs("cutbot.config.validator", level="ERROR"):
            with self.assertRaises(ConfigValidationError):
                validate_config(cfg)


class TestGetConfig(unittest.TestCase):
    def write_config(self, text):
        f = tempfile.NamedTemporaryFile("w", suffix=".yaml", delete=False, encoding="utf-8")
        f.write(textwrap.dedent(text))
        f.close()
        self.addCleanup(os.unlink, f.name)
        return f.name

    def setUp(self):
        patcher = mock.patch("cutbot.config.loader.load_dotenv")
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_loads_file_and_applies_environment(self):
        path = self.write_config("""
            bot_token: ""
            api:
              base_url: http://localhost:3000/api/v1
              retry:
                max_attempts: 5
                base_delay_ms: 200
        """)
        env = {"DISCORD_TOKEN": "env-token", "API_KEY": "k"}
        with mock.patch.dict(os.environ, env, clear=True):
            cfg = get_config(path)

        self.assertEqual(cfg["bot_token"], "env-token")
        settings = ApiSettings.from_config(cfg)
        self.assertEqual(settings.api_key, "k")
        self.assertEqual(settings.retry, RetryPolicy(max_attempts=5, base_delay_ms=200))
        self.assertEqual(settings.timeout_s, 5.0)

    def test_config_path_from_environment(self):
        path = self.write_config("""
            bot_token: t
            api: {}
        """)
        with mock.patch.dict(os.environ, {"CONFIG_PATH": path}, clear=True):
            cfg = get_config()

        self.assertEqual(cfg["bot_token"], "t")

    def test_invalid_config_exits(self):
        path = self.write_config("""
            api:
              timeout_ms: -1
        """)
        with mock.patch.dict(os.environ, {}, clear=True), self.assertLogs(level="ERROR"):
            with self.assertRaises(SystemExit) as ctx:
                get_config(path)
        self.assertEqual(ctx.exception.code, 1)

    def test_missing_file_exits(self):
        with mock.patch.dict(os.environ, {}, clear=True), self.assertLogs(level="ERROR"):
            with self.assertRaises(SystemExit):
                get_config("/nonexistent/config.yaml")


class TestConfigModels(unittest.TestCase):
    def test_defaults(self):
        settings = ApiSettings.from_config({"api": {}})

        self.assertEqual(settings.base_url, "http://localhost:3000/api/v1")
        self.assertIsNone(settings.api_key)
        self.assertEqual(settings.timeout_ms, 5000)
        self.assertEqual(settings.retry, RetryPolicy())

    def test_trailing_slash_is_stripped(self):
        settings = ApiSettings.from_config({"api": {"base_url": "https://ladder.example/api/v1/"}})

        self.assertEqual(settings.base_url, "https://ladder.example/api/v1")

    def test_permission_helpers(self):
        self.assertEqual(admin_roles({}), DEFAULT_ADMIN_ROLES)
        self.assertEqual(admin_roles({"permissions": {"admin_roles": ["Ref"]}}), ("Ref",))
        self.assertEqual(admin_ids({}), [])
        self.assertEqual(admin_ids(valid_config()), [111])


if __name__ == "__main__":
    if len(sys.argv) > 1:
        logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s: %(message)s")
        config_file = sys.argv[1]
        print(f"Validating config: {config_file}")
        print("-" * 70)
        config = get_config(config_file)
        settings = ApiSettings.from_config(config)
        print("-" * 70)
        print("✅ Config validation PASSED")
        print(f"   Backend: {settings.base_url} (timeout {settings.timeout_ms}ms)")
        print(f"   Retry: {settings.retry.max_attempts} attempts, base {settings.retry.base_delay_ms}ms")
        print(f"   Admin roles: {', '.join(admin_roles(config))}")
        sys.exit(0)
    unittest.main()
