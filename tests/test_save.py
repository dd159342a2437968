"""Tests for save files and export/import text."""

import base64
import json

from game.save import SAVE_ENV_VAR, SaveManager, _encode_export, _try_import_data, default_save_path
from game.state import GameState


def _manager(tmp_path, money=0):
    state = GameState()
    state.add_money(money)
    return state, SaveManager(state, tmp_path / "saves" / "save.json", clock=lambda: 42)


def test_save_then_load_restores_state(tmp_path):
    state, saves = _manager(tmp_path, money=123)
    state.unlock_color("red")
    state.grid.set_cell(1, 1, "red")
    assert saves.save() is True
    assert saves.has_save()
    assert not (tmp_path / "saves" / "save.tmp").exists()

    on_disk = json.loads(saves.path.read_text(encoding="utf-8"))
    assert on_disk["savedAt"] == 42
    assert on_disk["version"] == 4

    fresh = GameState()
    assert SaveManager(fresh, saves.path).load() is True
    assert fresh.money == 123
    assert fresh.grid.get(1, 1) == "red"
    assert fresh.has_color("red")


def test_load_missing_or_corrupt_leaves_state(tmp_path):
    state, saves = _manager(tmp_path, money=7)
    assert saves.load() is False

    saves.path.parent.mkdir(parents=True)
    saves.path.write_text("{truncated", encoding="utf-8")
    assert saves.load() is False
    assert state.money == 7


def test_load_unsupported_version_is_rejected(tmp_path):
    state, saves = _manager(tmp_path, money=7)
    saves.path.parent.mkdir(parents=True)
    saves.path.write_text(json.dumps({"version": 1, "money": 5000}), encoding="utf-8")
    assert saves.load() is False
    assert state.money == 7


def test_delete_save(tmp_path):
    state, saves = _manager(tmp_path)
    assert saves.delete_save() is False
    saves.save()
    assert saves.delete_save() is True
    assert not saves.has_save()


def test_export_is_base64_json(tmp_path):
    state, saves = _manager(tmp_path, money=99)
    text = saves.export_text()
    decoded = json.loads(base64.b64decode(text))
    assert decoded["money"] == 99
    assert decoded["savedAt"] == 42


def test_import_accepts_base64_and_raw_json(tmp_path):
    source, saves = _manager(tmp_path, money=55)
    exported = saves.export_text()
    raw = json.dumps(source.serialize())

    for blob in (exported, "  " + exported + "\n", raw):
        target = GameState()
        assert SaveManager(target, tmp_path / "other.json").import_text(blob) is True
        assert target.money == 55


def test_import_rejects_garbage(tmp_path):
    state, saves = _manager(tmp_path, money=3)
    not_a_save = base64.b64encode(b'{"money": 1}').decode("ascii")
    for blob in ("", "hello world", "!!!!", not_a_save, "[1, 2]", _encode_export({"version": 99})):
        assert saves.import_text(blob) is False
    assert state.money == 3


def test_try_import_data_requires_version():
    assert _try_import_data('{"version": 4}') == {"version": 4}
    assert _try_import_data('{"money": 4}') is None
    assert _try_import_data(_encode_export({"version": 2})) == {"version": 2}


def test_export_and_import_files(tmp_path):
    state, saves = _manager(tmp_path, money=31)
    out = tmp_path / "export.txt"
    assert saves.export_to_file(out) is True

    target = GameState()
    assert SaveManager(target, tmp_path / "x.json").import_from_file(out) is True
    assert target.money == 31
    assert SaveManager(target, tmp_path / "x.json").import_from_file(tmp_path / "nope.txt") is False


def test_default_save_path_honors_env(monkeypatch, tmp_path):
    monkeypatch.setenv(SAVE_ENV_VAR, str(tmp_path / "custom.json"))
    assert default_save_path() == tmp_path / "custom.json"
    monkeypatch.delenv(SAVE_ENV_VAR)
    assert default_save_path().name == "save.json"


def test_load_rejects_save_that_is_not_utf8(tmp_path):
    state, saves = _manager(tmp_path, money=7)
    saves.path.parent.mkdir(parents=True)
    saves.path.write_bytes(b'{"version": 4, "money": \xff\xfe}')
    assert saves.load() is False
    assert state.money == 7


def test_import_file_rejects_binary_garbage(tmp_path):
    state, saves = _manager(tmp_path, money=7)
    path = tmp_path / "import.txt"
    path.write_bytes(b"\xff\xfe\xfa")
    assert saves.import_from_file(path) is False
    assert state.money == 7
