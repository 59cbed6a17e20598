import pytest
import yaml

from tally.shared.core.configuration import ConfigManager, SystemConfig, ValidationLevel
from tally.shared.core.errors import ConfigurationError


def write_yaml(path, data):
    path.write_text(yaml.safe_dump(data, allow_unicode=True), encoding="utf-8")


def test_packaged_defaults_load():
    config = ConfigManager().get_config()
    assert config.widget.placeholder_title == "횟수 체크"
    assert config.channel.name == "com.example.knitknit/widget"
    assert config.consumer.count_floor == 0


def test_missing_files_fall_back_to_model_defaults(tmp_path):
    assert ConfigManager(tmp_path).get_config() == SystemConfig()


def test_precedence_env_over_project_over_user(tmp_path, monkeypatch):
    write_yaml(tmp_path / "user.yaml", {"consumer": {"poll_interval": 2.0}, "store": {"backend": "memory"}})
    write_yaml(tmp_path / "project.yaml", {"consumer": {"poll_interval": 3.0}})
    monkeypatch.setenv("TALLY_STORE_BACKEND", "duckdb")

    config = ConfigManager(tmp_path).get_config()

    assert config.consumer.poll_interval == 3.0
    assert config.store.backend == "duckdb"


def test_bad_env_number_is_ignored(tmp_path, monkeypatch):
    monkeypatch.setenv("TALLY_POLL_INTERVAL", "soon")
    assert ConfigManager(tmp_path).get_config().consumer.poll_interval == 1.0


def test_strict_validation_raises(tmp_path):
    write_yaml(tmp_path / "project.yaml", {"store": {"backend": "floppy"}})
    with pytest.raises(ConfigurationError):
        ConfigManager(tmp_path).get_config(ValidationLevel.STRICT)


def test_lenient_validation_uses_defaults(tmp_path):
    write_yaml(tmp_path / "project.yaml", {"store": {"backend": "floppy"}})
    assert ConfigManager(tmp_path).get_config(ValidationLevel.LENIENT) == SystemConfig()


def test_save_project_config_round_trips(tmp_path):
    manager = ConfigManager(tmp_path)
    assert manager.save_project_config({"widget": {"placeholder_title": "Rows"}})
    assert manager.get_config().widget.placeholder_title == "Rows"


def test_counters_path_and_redraw_flag_from_env(tmp_path, monkeypatch):
    monkeypatch.setenv("TALLY_COUNTERS_PATH", str(tmp_path / "c.duckdb"))
    monkeypatch.setenv("TALLY_REFRESH_ON_DISPATCH", "yes")
    config = ConfigManager(tmp_path).get_config()
    assert config.store.counters_path == str(tmp_path / "c.duckdb")
    assert config.widget.refresh_on_dispatch is True


def test_bad_env_flag_is_ignored(tmp_path, monkeypatch):
    monkeypatch.setenv("TALLY_REFRESH_ON_DISPATCH", "maybe")
    assert ConfigManager(tmp_path).get_config().widget.refresh_on_dispatch is False
