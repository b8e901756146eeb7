"""Unit tests for ipsnav.config."""

import json
import unittest

import pytest

from ipsnav.config import (
    EngineConfig,
    FusionConfig,
    HeadingConfig,
    LocalizerConfig,
    PdrConfig,
    PlannerConfig,
    engine_config_from_dict,
    load_engine_config,
)
from ipsnav.exceptions import ParseError


class TestDefaults(unittest.TestCase):
    def test_engine_defaults(self) -> None:
        config = EngineConfig()
        self.assertEqual(config.scan_interval_s, 5.0)
        self.assertEqual(config.pdr.step_length_m, 0.75)
        self.assertEqual(config.pdr.accel_delta_threshold, 1.2)
        self.assertEqual(config.pdr.min_step_interval_s, 0.3)
        self.assertEqual(config.heading.smoothing_alpha, 0.1)
        self.assertEqual(config.fusion.process_noise, 0.05)
        self.assertEqual(config.fusion.measurement_noise, 1.0)
        self.assertEqual(config.fusion.min_fix_displacement_m, 0.25)
        self.assertEqual(config.localizer.k, 3)
        self.assertEqual(config.localizer.missing_rssi_dbm, -100.0)
        self.assertEqual(config.planner.off_route_threshold_m, 2.0)
        self.assertEqual(config.planner.turn_threshold_deg, 30.0)

    def test_sections_are_independent(self) -> None:
        a = EngineConfig()
        b = EngineConfig()
        a.pdr.step_length_m = 0.6
        self.assertEqual(b.pdr.step_length_m, 0.75)


@pytest.mark.parametrize(
    "factory",
    [
        lambda: PdrConfig(step_length_m=0.0),
        lambda: PdrConfig(target_tolerance_deg=0.0),
        lambda: HeadingConfig(mode="kalman"),
        lambda: HeadingConfig(smoothing_alpha=1.5),
        lambda: FusionConfig(measurement_noise=0.0),
        lambda: FusionConfig(process_noise=-0.1),
        lambda: LocalizerConfig(k=0),
        lambda: PlannerConfig(off_route_threshold_m=-1.0),
        lambda: EngineConfig(scan_interval_s=0.0),
    ],
)
def test_invalid_values_rejected(factory):
    with pytest.raises(ValueError):
        factory()


class TestFromDict:
    def test_partial_sections_keep_defaults(self):
        config = engine_config_from_dict(
            {"scan_interval_s": 3.0, "pdr": {"step_length_m": 0.7}, "localizer": {"k": 5}}
        )

        assert config.scan_interval_s == 3.0
        assert config.pdr.step_length_m == 0.7
        assert config.pdr.min_step_interval_s == 0.3
        assert config.localizer.k == 5
        assert config.fusion == FusionConfig()

    def test_unknown_top_level_key(self):
        with pytest.raises(ParseError, match="scan_period"):
            engine_config_from_dict({"scan_period": 3.0})

    def test_unknown_section_key(self):
        with pytest.raises(ParseError, match="stride"):
            engine_config_from_dict({"pdr": {"stride": 0.7}})

    def test_invalid_value_is_parse_error(self):
        with pytest.raises(ParseError):
            engine_config_from_dict({"localizer": {"k": 0}})
        with pytest.raises(ParseError):
            engine_config_from_dict({"scan_interval_s": -1.0})

    def test_section_must_be_object(self):
        with pytest.raises(ParseError):
            engine_config_from_dict({"fusion": [1.0, 2.0]})

    def test_document_must_be_object(self):
        with pytest.raises(ParseError):
            engine_config_from_dict([])


class TestLoadFile:
    def test_load(self, tmp_path):
        path = tmp_path / "engine.json"
        path.write_text(
            json.dumps({"heading": {"mode": "change_gate"}, "planner": {"off_route_threshold_m": 3.0}}),
            encoding="utf-8",
        )

        config = load_engine_config(path)

        assert config.heading.mode == "change_gate"
        assert config.planner.off_route_threshold_m == 3.0

    def test_missing_file(self, tmp_path):
        with pytest.raises(ParseError):
            load_engine_config(tmp_path / "absent.json")

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "engine.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ParseError):
            load_engine_config(path)
