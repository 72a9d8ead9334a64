from datetime import datetime, timedelta
from pathlib import Path

import pytest
from pydantic import ValidationError

from sampleseries.config.run import RunConfig, load_run_config


def test_defaults_match_reference_run():
    cfg = RunConfig()
    assert cfg.cycles == "auto"
    assert cfg.samples_per_cycle == 222222
    assert cfg.start_time == datetime(1990, 1, 1, 1, 1, 1, 1000)
    assert cfg.interval == timedelta(minutes=1)
    assert cfg.max_parallel_cycles == 4
    assert cfg.log_dir == Path("localDebug")
    assert cfg.log_file == "application_log.txt"
    assert cfg.visuals == "AUTO"


def test_load_run_config_from_yaml(tmp_path):
    path = tmp_path / "run.yaml"
    path.write_text(
        "\n".join(
            [
                "cycles: 2",
                "samples_per_cycle: 1000",
                "start_time: '2024-03-01T00:00:00'",
                "interval: 90s",
                "load_work_units: 0",
                "validate_work_units: 10",
                "validation_workers: 8",
                "log_level: debug",
                "visuals: false",
            ]
        ),
        encoding="utf-8",
    )
    cfg = load_run_config(path)
    assert cfg.cycles == 2
    assert cfg.samples_per_cycle == 1000
    assert cfg.start_time == datetime(2024, 3, 1)
    assert cfg.interval == timedelta(seconds=90)
    assert cfg.validate_work_units == 10
    assert cfg.validation_workers == 8
    assert cfg.log_level == "DEBUG"
    assert cfg.visuals == "OFF"


def test_empty_yaml_uses_defaults(tmp_path):
    path = tmp_path / "run.yaml"
    path.write_text("", encoding="utf-8")
    assert load_run_config(path).model_dump() == RunConfig().model_dump()


def test_missing_yaml_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_run_config(tmp_path / "missing.yaml")


def test_non_mapping_yaml_rejected(tmp_path):
    path = tmp_path / "run.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(TypeError):
        load_run_config(path)


@pytest.mark.parametrize(
    "field, value",
    [
        ("cycles", 0),
        ("cycles", "many"),
        ("samples_per_cycle", -1),
        ("interval", "0s"),
        ("interval", "0.5ms"),
        ("interval", "fortnight"),
        ("log_level", "chatty"),
        ("visuals", "fancy"),
        ("max_parallel_cycles", 0),
    ],
)
def test_invalid_values_rejected(field, value):
    with pytest.raises(ValidationError):
        RunConfig.model_validate({field: value})


def test_cycles_accepts_numeric_strings_and_auto():
    assert RunConfig(cycles="3").cycles == 3
    assert RunConfig(cycles="AUTO").cycles == "auto"
    assert RunConfig(cycles=None).cycles == "auto"


@pytest.mark.parametrize("cpu, expected", [(1, 1), (2, 1), (3, 1), (4, 2), (8, 4), (32, 4)])
def test_resolve_cycles_auto(cpu, expected):
    assert RunConfig().resolve_cycles(cpu) == expected


def test_resolve_cycles_explicit():
    assert RunConfig(cycles=7).resolve_cycles(2) == 7


def test_example_run_yaml_matches_defaults():
    example = Path(__file__).parents[3] / "examples" / "run.yaml"
    cfg = load_run_config(example)
    assert cfg.model_dump() == RunConfig().model_dump()
