from pathlib import Path

import pytest

from pyoptstore import OptionsStore
from pyoptstore.errors import ConfigurationError, StorageLoadError
from pyoptstore.host import FileHost
from pyoptstore.host.backends import get_backend_for_path, registered_suffixes
from pyoptstore.host.backends.json_backend import JsonBackend
from pyoptstore.host.backends.yaml_backend import YamlBackend
from tests.utils import ADMIN, ADMIN_CAPS


def require_pyyaml():
    try:
        import yaml  # type: ignore  # noqa: F401
    except ModuleNotFoundError:
        pytest.skip("PyYAML not installed")


def _admin(host: FileHost) -> FileHost:
    host.grant(ADMIN, *ADMIN_CAPS)
    host.act_as(ADMIN)
    return host


def test_backend_registry():
    assert isinstance(get_backend_for_path(Path("state.json")), JsonBackend)
    assert isinstance(get_backend_for_path(Path("state.YML")), YamlBackend)
    assert {".json", ".yaml", ".yml"} <= set(registered_suffixes())
    with pytest.raises(ConfigurationError, match="'.ini'"):
        get_backend_for_path(Path("state.ini"))
    with pytest.raises(ConfigurationError):
        FileHost(Path("state"))


def test_json_state_survives_reload(tmp_path: Path):
    path = tmp_path / "host.json"
    host = FileHost(path)
    host.add_option("opts", {"a": 1}, autoload=False)
    host.update_user_option(5, "prefs", {"b": 2})
    host.update_post_meta(9, "layout", {"cols": 2})
    again = FileHost(path)
    assert again.get_option("opts") == {"a": 1}
    assert again.is_autoloaded("opts") is False
    assert again.get_user_option(5, "prefs") == {"b": 2}
    assert again.get_post_meta(9, "layout") == {"cols": 2}


def test_yaml_state_survives_reload(tmp_path: Path):
    require_pyyaml()
    path = tmp_path / "host.yaml"
    FileHost(path).add_site_option("net", {"n": [1, 2]})
    assert FileHost(path).get_site_option("net") == {"n": [1, 2]}


def test_empty_and_missing_files(tmp_path: Path):
    empty = tmp_path / "empty.json"
    empty.write_text("", encoding="utf-8")
    assert FileHost(empty).snapshot()["blogs"] == {}
    assert FileHost(tmp_path / "missing.json").get_option("opts") is None


def test_invalid_json_raises(tmp_path: Path):
    path = tmp_path / "bad.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(StorageLoadError):
        FileHost(path)
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(StorageLoadError):
        FileHost(path)


def test_invalid_yaml_raises(tmp_path: Path):
    require_pyyaml()
    path = tmp_path / "bad.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(StorageLoadError):
        FileHost(path)


def test_store_on_file_host(tmp_path: Path, bus):
    path = tmp_path / "site.json"
    store = OptionsStore.site("opts", _admin(FileHost(path)), events=bus)
    store.register_schema({"title": {"default": "Untitled"}}, seed=True, flush=True)
    store.set_option("count", 3).commit_merge()
    reopened = OptionsStore.site("opts", _admin(FileHost(path)), events=bus)
    assert reopened.get_options() == {"title": "Untitled", "count": 3}
    assert not path.with_suffix(".json.tmp").exists()
