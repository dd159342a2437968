"""raylib compatibility layer for the desktop frontend.

Imports the raylib (or pyray) C bindings and re-exports the subset the
frontend uses under snake_case names, with str -> UTF-8 bytes conversion
for the calls that take ``const char*``.
"""
from __future__ import annotations

try:
    from raylib import *  # type: ignore
except ImportError:
    try:
        from pyray import *  # type: ignore
    except ImportError as exc:
        raise ImportError(
            "Could not import raylib bindings. Install 'raylib' or 'pyray'."
        ) from exc

# Some bindings expose Color/Vector2 as structs, others take plain tuples.
if "Color" not in globals():
    def Color(r: int, g: int, b: int, a: int = 255):  # type: ignore
        return (r, g, b, a)

if "Vector2" not in globals():
    def Vector2(x: float, y: float):  # type: ignore
        return (x, y)

_CAMEL_MAP = {
    "init_window": "InitWindow",
    "set_target_fps": "SetTargetFPS",
    "window_should_close": "WindowShouldClose",
    "is_window_minimized": "IsWindowMinimized",
    "begin_drawing": "BeginDrawing",
    "clear_background": "ClearBackground",
    "end_drawing": "EndDrawing",
    "get_frame_time": "GetFrameTime",
    "is_key_pressed": "IsKeyPressed",
    "is_key_down": "IsKeyDown",
    "draw_text": "DrawText",
    "draw_rectangle": "DrawRectangle",
    "draw_rectangle_lines": "DrawRectangleLines",
    "draw_line": "DrawLine",
    "close_window": "CloseWindow",
    "get_mouse_position": "GetMousePosition",
    "is_mouse_button_pressed": "IsMouseButtonPressed",
    "is_mouse_button_down": "IsMouseButtonDown",
    "is_mouse_button_released": "IsMouseButtonReleased",
    "get_mouse_wheel_move": "GetMouseWheelMove",
    "measure_text": "MeasureText",
    "get_time": "GetTime",
    "set_exit_key": "SetExitKey",
    "begin_scissor_mode": "BeginScissorMode",
    "end_scissor_mode": "EndScissorMode",
    "set_clipboard_text": "SetClipboardText",
    "get_clipboard_text": "GetClipboardText",
}

for _snake, _camel in _CAMEL_MAP.items():
    if _snake not in globals() and _camel in globals():
        globals()[_snake] = globals()[_camel]

if "MOUSE_BUTTON_MIDDLE" not in globals():
    MOUSE_BUTTON_MIDDLE = 2  # type: ignore


def _encode_text(value):
    if isinstance(value, str):
        return value.encode("utf-8")
    return value


def _decode_text(value):
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    try:
        # cffi char* from the raw raylib module
        return ffi.string(value).decode("utf-8", errors="replace")  # type: ignore[name-defined]
    except (NameError, TypeError):
        return str(value)


_init_window = globals()["init_window"]
_draw_text = globals()["draw_text"]
_measure_text = globals()["measure_text"]
_set_clipboard_text = globals().get("set_clipboard_text")
_get_clipboard_text = globals().get("get_clipboard_text")


def init_window(width, height, title):  # type: ignore[no-redef]
    return _init_window(width, height, _encode_text(title))


def draw_text(text, x, y, size, color):  # type: ignore[no-redef]
    return _draw_text(_encode_text(text), int(x), int(y), int(size), color)


def measure_text(text, size):  # type: ignore[no-redef]
    return _measure_text(_encode_text(text), int(size))


def set_clipboard_text(text: str) -> None:  # type: ignore[no-redef]
    if _set_clipboard_text is not None:
        _set_clipboard_text(_encode_text(text))


def get_clipboard_text() -> str:  # type: ignore[no-redef]
    if _get_clipboard_text is None:
        return ""
    return _decode_text(_get_clipboard_text())
