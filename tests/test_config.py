from pathlib import Path

import pytest

from budgetplan.config import AppConfig, load_config


def test_load_config_resolves_output_relative_to_file(tmp_path):
    config_path = tmp_path / "conf" / "budget.yaml"
    config_path.parent.mkdir()
    config_path.write_text(
        "school:\n"
        "  name: School of Law\n"
        "  code: SL-7\n"
        "dashboard:\n"
        "  top_n: 3\n"
        "output:\n"
        "  directory: reports\n",
        encoding="utf-8",
    )

    config = load_config(config_path)

    assert config.school.name == "School of Law"
    assert config.school.submitted_by == ""
    assert config.dashboard.top_n == 3
    assert config.insights.provider == "offline"
    assert config.output.directory == (config_path.parent / "reports").resolve()
    assert config.output.ledgers_report == "ledger_totals.csv"


def test_load_config_without_path_uses_defaults():
    config = load_config()

    assert isinstance(config, AppConfig)
    assert config.output.directory == (Path.cwd() / "output").resolve()


def test_load_config_rejects_unknown_keys(tmp_path):
    config_path = tmp_path / "bad.yaml"
    config_path.write_text("dashboard:\n  top_k: 4\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_config(config_path)


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")


def test_empty_config_file_gives_defaults(tmp_path):
    config_path = tmp_path / "empty.yaml"
    config_path.write_text("", encoding="utf-8")

    assert load_config(config_path).dashboard.top_n == 5
