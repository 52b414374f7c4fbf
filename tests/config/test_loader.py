import json

from promptassembler.config.loader import get_config, load_config, reset_config_cache, save_config
from promptassembler.config.paths import get_user_config_file, get_workspace_config_path
from promptassembler.config.schema import AppConfig, FormatPreset, SortOrder


def test_defaults_without_config_file():
    config = load_config()

    assert config.sort_order is SortOrder.OPENING_ORDER
    assert config.format.preset is FormatPreset.XML
    assert "node_modules" in config.ignore.directories
    assert config.resolve_timeout == 30.0


def test_user_config_is_loaded_and_cached():
    get_user_config_file().write_text(json.dumps({"sort_order": "filePath"}), encoding="utf-8")

    first = load_config()
    assert first.sort_order is SortOrder.FILE_PATH
    assert get_config() is first

    get_user_config_file().write_text(json.dumps({"sort_order": "openingOrder"}), encoding="utf-8")
    assert load_config() is first

    reset_config_cache()
    assert load_config().sort_order is SortOrder.OPENING_ORDER


def test_corrupted_user_config_is_backed_up():
    config_file = get_user_config_file()
    config_file.write_text("{not json", encoding="utf-8")

    config = load_config()

    assert config == AppConfig()
    assert not config_file.exists()
    assert config_file.with_suffix(".json.corrupted").exists()


def test_invalid_values_fall_back_to_defaults(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"resolve_timeout": -1}), encoding="utf-8")

    assert load_config(path) == AppConfig()


def test_explicit_path_is_not_cached(tmp_path):
    path = tmp_path / "custom.json"
    path.write_text(json.dumps({"format": {"preset": "markdown"}}), encoding="utf-8")

    assert load_config(path).format.preset is FormatPreset.MARKDOWN
    assert get_config().format.preset is FormatPreset.XML


def test_save_config_round_trip(tmp_path):
    path = tmp_path / "nested" / "config.json"
    config = AppConfig(sort_order=SortOrder.FILE_PATH, max_context_tokens=1000)

    assert save_config(config, path) is True
    assert load_config(path) == config
    assert list(path.parent.iterdir()) == [path]


def test_workspace_config_path(tmp_path):
    assert get_workspace_config_path(tmp_path) is None
    (tmp_path / ".promptassembler.json").write_text("{}", encoding="utf-8")
    assert get_workspace_config_path(tmp_path) == tmp_path / ".promptassembler.json"
