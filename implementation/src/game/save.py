"""Save/load and export/import for game state.

Auto-save: JSON written atomically to a local file (tmp + replace).
Export: base64-JSON of the same document, for copy/paste or a .txt file.
Import: accepts raw JSON or base64-JSON; anything else is rejected and
the current game is left untouched.
"""
from __future__ import annotations

import base64
import binascii
import json
import os
import time
from pathlib import Path
from typing import Any, Callable, Dict, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from game.state import GameState

SAVE_ENV_VAR = "GRID_INCREMENTAL_SAVE"


def default_save_path() -> Path:
    override = os.environ.get(SAVE_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path(__file__).resolve().parent.parent / "save.json"


def _now_ms() -> int:
    return int(time.time() * 1000)


def _encode_export(data: Dict[str, Any]) -> str:
    json_str = json.dumps(data, separators=(",", ":"))
    return base64.b64encode(json_str.encode("utf-8")).decode("ascii")


def _try_import_data(encoded: str) -> Optional[Dict[str, Any]]:
    """Parse import text: raw JSON first (a save.json pasted as-is), then base64-JSON."""
    encoded = encoded.strip()
    try:
        data = json.loads(encoded)
        if isinstance(data, dict) and "version" in data:
            return data
    except (json.JSONDecodeError, ValueError):
        pass

    try:
        raw = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        return None

    try:
        data = json.loads(raw.decode("utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    if isinstance(data, dict) and "version" in data:
        return data
    return None


class SaveManager:
    def __init__(
        self,
        state: "GameState",
        path: Optional[Path] = None,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        self.state = state
        self.path = Path(path) if path is not None else default_save_path()
        self.clock = clock or _now_ms

    def _snapshot(self) -> Dict[str, Any]:
        data = self.state.serialize()
        data["savedAt"] = self.clock()
        return data

    def has_save(self) -> bool:
        return self.path.exists()

    def save(self) -> bool:
        """Write JSON atomically (tmp + replace)."""
        tmp_path = self.path.with_suffix(".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(self._snapshot(), indent=2), encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as e:
            print(f"[save] Error saving game: {e}")
            return False
        return True

    def load(self) -> bool:
        """Read and restore the save file. Returns False on missing/corrupt/unsupported data."""
        if not self.path.exists():
            return False
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            print(f"[save] Error loading save file: {e}")
            return False
        if not self.state.deserialize(data):
            print(f"[save] Ignoring unusable save file {self.path.name}")
            return False
        return True

    def delete_save(self) -> bool:
        try:
            self.path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            print(f"[save] Error deleting save file: {e}")
            return False
        return True

    # ── Export / import ──────────────────────────────────────────

    def export_text(self) -> str:
        return _encode_export(self._snapshot())

    def import_text(self, blob: str) -> bool:
        data = _try_import_data(str(blob))
        if data is None:
            print("[save] Could not parse import data (not a valid save)")
            return False
        return self.state.deserialize(data)

    def export_to_file(self, path: Path) -> bool:
        try:
            Path(path).write_text(self.export_text(), encoding="utf-8")
        except OSError as e:
            print(f"[save] Error exporting save: {e}")
            return False
        return True

    def import_from_file(self, path: Path) -> bool:
        try:
            encoded = Path(path).read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            print(f"[save] Error reading import file: {e}")
            return False
        return self.import_text(encoded)
