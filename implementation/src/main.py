from __future__ import annotations

import asyncio
from typing import Optional, Tuple

from raylib_compat import (
    Color,
    KEY_C,
    KEY_E,
    KEY_I,
    KEY_S,
    KEY_SPACE,
    KEY_Z,
    MOUSE_BUTTON_LEFT,
    MOUSE_BUTTON_MIDDLE,
    MOUSE_BUTTON_RIGHT,
    begin_drawing,
    clear_background,
    close_window,
    end_drawing,
    get_clipboard_text,
    get_mouse_position,
    get_mouse_wheel_move,
    get_time,
    init_window,
    is_key_pressed,
    is_mouse_button_down,
    is_mouse_button_pressed,
    is_window_minimized,
    set_clipboard_text,
    set_exit_key,
    set_target_fps,
    window_should_close,
)

from game.commands import CommandDispatcher
from game.events import EventType
from game.gridview import GridView
from game.layout import load_layout
from game.session import GameSession
from game.ui import Ui, format_number_with_suffix

HOLD_TO_PAINT_ID = "hold_to_paint"


async def main() -> None:
    layout = load_layout()
    init_window(layout.window_width, layout.window_height, "Grid Incremental")
    set_exit_key(0)  # Disable raylib's default ESC-to-close
    set_target_fps(60)

    session = GameSession()
    commands = CommandDispatcher(session)
    state = session.state
    ui = Ui()
    view = GridView.from_layout(layout)

    def refit(_event=None) -> None:
        view.fit(state.grid.width, state.grid.height)

    def on_completed(event) -> None:
        reward = format_number_with_suffix(event.contract.reward)
        ui.flash(f"Contract complete! +${reward}", True, get_time())

    state.events.subscribe(EventType.GRID_RESIZED, refit)
    state.events.subscribe(EventType.GRID_LOADED, refit)
    state.events.subscribe(EventType.STATE_LOADED, refit)
    state.events.subscribe(EventType.CONTRACT_COMPLETED, on_completed)

    session.start()
    refit()

    def run(name: str, **kwargs) -> None:
        result = commands.dispatch(name, **kwargs)
        if not result.success and result.reason:
            ui.flash(result.reason, False, get_time())

    last_drag_cell: Optional[Tuple[int, int]] = None
    prev_mx, prev_my = 0.0, 0.0

    try:
        while not window_should_close():
            # Timers stop while the window is hidden and pick up again on restore
            if is_window_minimized():
                session.pause()
            else:
                session.resume()

            mouse = get_mouse_position()
            mx, my = mouse.x, mouse.y
            wheel = get_mouse_wheel_move()
            left_pressed = is_mouse_button_pressed(MOUSE_BUTTON_LEFT)
            right_pressed = is_mouse_button_pressed(MOUSE_BUTTON_RIGHT)
            left_down = is_mouse_button_down(MOUSE_BUTTON_LEFT)
            right_down = is_mouse_button_down(MOUSE_BUTTON_RIGHT)

            view.handle_scroll_input(mx, my, prev_mx, prev_my, is_mouse_button_down(MOUSE_BUTTON_MIDDLE), wheel)

            # ── Painting ─────────────────────────────────────────────
            hover = view.screen_to_cell(mx, my)
            if left_pressed or right_pressed:
                last_drag_cell = None
                if hover is not None:
                    run("paint", x=hover[0], y=hover[1], erase=right_pressed)
                    last_drag_cell = hover
            elif (left_down or right_down) and state.has_upgrade(HOLD_TO_PAINT_ID):
                cell = view.screen_to_cell_unbounded(mx, my)
                if cell is not None and cell != last_drag_cell:
                    run("paint", x=cell[0], y=cell[1], erase=right_down and not left_down)
                    last_drag_cell = cell
            else:
                last_drag_cell = None

            # ── Keyboard ─────────────────────────────────────────────
            if is_key_pressed(KEY_Z):
                run("undo")
            if is_key_pressed(KEY_C):
                run("clear_grid")
            if is_key_pressed(KEY_SPACE) and state.active_contract is None:
                run("accept_contract")
            if is_key_pressed(KEY_S):
                result = commands.dispatch("save")
                ui.flash("Saved" if result.success else result.reason, result.success, get_time())
            if is_key_pressed(KEY_E):
                result = commands.dispatch("export")
                set_clipboard_text(result.data["text"])
                ui.flash("Save copied to clipboard", True, get_time())
            if is_key_pressed(KEY_I):
                result = commands.dispatch("import", blob=get_clipboard_text())
                ui.flash("Imported save" if result.success else result.reason, result.success, get_time())

            # ── Draw ─────────────────────────────────────────────────
            begin_drawing()
            clear_background(Color(24, 26, 32, 255))
            ui.draw_background(layout)
            ui.draw_hud(session, layout)
            pending = [
                ui.draw_palette(session, layout, mx, my, left_pressed),
                ui.draw_contract_panel(session, layout, mx, my, left_pressed),
                ui.draw_shop(session, layout, mx, my, left_pressed, wheel),
            ]
            ui.draw_grid(session, view, hover)
            ui.draw_status(session, layout, get_time())
            end_drawing()

            for command in pending:
                if command is not None:
                    name, kwargs = command
                    run(name, **kwargs)

            prev_mx, prev_my = mx, my
            await asyncio.sleep(0)
    finally:
        session.shutdown()
        close_window()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
