# app.py
import flet as ft
import os

from game_actions.sudoku_actions import create_game_ref, process_sudoku_action
from sudoku_game import leaderboard_view, sudoku_game_entry

# page.session_id -> game_ref
PLAYER_SESSIONS = {}


# --- FLET APP MAIN FUNCTION (Routing and Views) ---
def main(page: ft.Page):
    page.title = "🧩 Sudoku"
    page.vertical_alignment = ft.MainAxisAlignment.START
    page.horizontal_alignment = ft.CrossAxisAlignment.CENTER
    page.theme_mode = ft.ThemeMode.LIGHT
    page.scroll = ft.ScrollMode.ADAPTIVE

    game_ref = create_game_ref()
    PLAYER_SESSIONS[page.session_id] = game_ref
    print(f"Session {page.session_id} opened.")

    def show_leaderboard(difficulty=None):
        if difficulty:
            game_ref["leaderboard_difficulty"] = difficulty
        page.go("/leaderboard")

    def go_to_game():
        page.go("/")

    def route_change(e=None):
        target_route = page.route or "/"
        page.views.clear()

        if target_route == "/leaderboard":
            controls, on_update = leaderboard_view(page, game_ref, go_to_game)
            game_ref["on_update"] = on_update
            page.views.append(ft.View(route="/leaderboard", controls=controls, padding=0))
            process_sudoku_action(game_ref, "FETCH_LEADERBOARD", {"difficulty": game_ref["leaderboard_difficulty"]})
        else:
            if target_route != "/":
                print(f"Action: Routing to game view (fallback for unknown route: {target_route})")
            controls, on_update = sudoku_game_entry(page, game_ref, show_leaderboard)
            game_ref["on_update"] = on_update
            page.views.append(ft.View(route="/", controls=controls, padding=0))

        if page.client_storage:
            page.update()

    def view_pop(e):
        if len(page.views) > 1:
            page.views.pop()
            page.go(page.views[-1].route)
        else:
            page.go("/")

    def on_disconnect(e):
        ref = PLAYER_SESSIONS.pop(page.session_id, None)
        if ref is not None:
            ref["on_update"] = None
            process_sudoku_action(ref, "LEAVE_GAME")
            print(f"Session {page.session_id} closed, timer stopped.")

    page.on_route_change = route_change
    page.on_view_pop = view_pop
    page.on_disconnect = on_disconnect

    page.go(page.route or "/")
    process_sudoku_action(game_ref, "START_GAME", {"difficulty": game_ref["difficulty"]})


if __name__ == "__main__":
    ft.app(
        target=main,
        port=int(os.environ.get("PORT", 8550)),
        view=ft.WEB_BROWSER,
    )
