from __future__ import annotations

import json
import os
import sys
import tempfile
import types
import unittest
from datetime import timedelta
from unittest.mock import patch

from showcase_node import config_loader
from showcase_node.badges.rules import DEFAULT_BADGES
from showcase_node.engine_config import EngineConfig
from showcase_node.errors import ConfigurationError


class TestEngineConfig(unittest.TestCase):
    def test_defaults(self):
        config = EngineConfig()
        self.assertEqual(config.upvote_weight, 10.0)
        self.assertEqual(config.view_weight, 1.0)
        self.assertEqual(config.half_life_days, 30.0)
        self.assertEqual(config.view_dedup_window, timedelta(minutes=30))
        self.assertEqual(config.badge_definitions, DEFAULT_BADGES)

    def test_camel_case_keys(self):
        config = EngineConfig.load({"upvoteWeight": 4, "halfLifeDays": 7, "viewDedupWindowMinutes": 5})
        self.assertEqual(config.upvote_weight, 4)
        self.assertEqual(config.half_life_days, 7)
        self.assertEqual(config.view_dedup_window, timedelta(minutes=5))

    def test_rejects_negative_weights(self):
        with self.assertRaises(ConfigurationError):
            EngineConfig.load({"upvote_weight": -1})
        with self.assertRaises(ConfigurationError):
            EngineConfig.load({"view_weight": -0.5})

    def test_rejects_non_positive_half_life(self):
        for value in (0, -30):
            with self.assertRaises(ConfigurationError):
                EngineConfig.load({"half_life_days": value})

    def test_rejects_non_finite_values(self):
        with self.assertRaises(ConfigurationError):
            EngineConfig.load({"upvote_weight": float("inf")})

    def test_rejects_duplicate_badge_ids(self):
        badge = {"id": "dup", "label": "Dup", "rule": {"kind": "first", "metric": "project_count"}}
        with self.assertRaises(ConfigurationError):
            EngineConfig.load({"badge_definitions": [badge, badge]})

    def test_rejects_negative_bonus(self):
        badge = {"id": "b", "label": "B", "bonus": -1, "rule": {"kind": "first", "metric": "project_count"}}
        with self.assertRaises(ConfigurationError):
            EngineConfig.load({"badgeDefinitions": [badge]})

    def test_rejects_unknown_rule_kind_and_option(self):
        badge = {"id": "b", "label": "B", "rule": {"kind": "lucky", "metric": "project_count"}}
        with self.assertRaises(ConfigurationError):
            EngineConfig.load({"badge_definitions": [badge]})
        with self.assertRaises(ConfigurationError):
            EngineConfig.load({"upvote_weigth": 1})

    def test_badge_lookup(self):
        config = EngineConfig()
        self.assertEqual(config.badge("rising-star").bonus, 20.0)
        self.assertIsNone(config.badge("nope"))


class TestConfigLoader(unittest.TestCase):
    def setUp(self):
        config_loader.reset_cache()

    def tearDown(self):
        config_loader.reset_cache()

    def test_default_when_nothing_configured(self):
        with patch.dict(os.environ, {}, clear=True):
            config = config_loader.load_config()
        self.assertEqual(config, EngineConfig())

    def test_load_is_cached(self):
        with patch.dict(os.environ, {}, clear=True):
            self.assertIs(config_loader.load_config(), config_loader.load_config())

    def test_loads_json_file(self):
        with tempfile.NamedTemporaryFile("w", suffix=".json", delete=False) as fh:
            json.dump({"upvoteWeight": 3, "badgeDefinitions": []}, fh)
            path = fh.name
        try:
            with patch.dict(os.environ, {"SHOWCASE_CONFIG_FILE": path}, clear=True):
                config = config_loader.load_config()
        finally:
            os.unlink(path)

        self.assertEqual(config.upvote_weight, 3)
        self.assertEqual(config.badge_definitions, ())

    def test_invalid_file_is_fatal(self):
        with tempfile.NamedTemporaryFile("w", suffix=".json", delete=False) as fh:
            json.dump({"half_life_days": 0}, fh)
            path = fh.name
        try:
            with patch.dict(os.environ, {"SHOWCASE_CONFIG_FILE": path}, clear=True):
                with self.assertRaises(ConfigurationError):
                    config_loader.load_config()
        finally:
            os.unlink(path)

    def test_missing_file_is_fatal(self):
        with patch.dict(os.environ, {"SHOWCASE_CONFIG_FILE": "/nonexistent/showcase.json"}, clear=True):
            with self.assertRaises(ConfigurationError):
                config_loader.load_config()

    def test_loads_module_object(self):
        module = types.ModuleType("showcase_test_settings")
        module.CONFIG = EngineConfig(view_weight=0)
        module.RAW = {"viewWeight": 2}
        module.NOT_A_CONFIG = 42
        with patch.dict(sys.modules, {"showcase_test_settings": module}):
            self.assertEqual(config_loader.load_config_object("showcase_test_settings:CONFIG").view_weight, 0)
            self.assertEqual(config_loader.load_config_object("showcase_test_settings:RAW").view_weight, 2)
            with self.assertRaises(ConfigurationError):
                config_loader.load_config_object("showcase_test_settings:NOT_A_CONFIG")
            with self.assertRaises(ConfigurationError):
                config_loader.load_config_object("showcase_test_settings:MISSING")

    def test_module_path_requires_colon(self):
        with self.assertRaises(ConfigurationError):
            config_loader.load_config_object("showcase_test_settings")


if __name__ == "__main__":
    unittest.main()
