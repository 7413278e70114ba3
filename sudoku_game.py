# sudoku_game.py
import flet as ft

from game_actions.sudoku_actions import get_game_snapshot, process_sudoku_action
from sudoku_session import Activity
from sudoku_utils import BOX_SIZE, DIFFICULTY_LEVELS

# --- Sizing Constants ---
FONT_SIZE_NORMAL = 14
FONT_SIZE_MEDIUM = 16
FONT_SIZE_LARGE = 18
FONT_SIZE_XLARGE = 20 # For cell numbers
FONT_SIZE_TITLE = 22
BUTTON_HEIGHT_NORMAL = 40
STANDARD_BORDER_RADIUS = 8
TITLE_ICON_SIZE = 26
SUDOKU_CELL_SIZE = 38
SUDOKU_GRID_BORDER_THICKNESS_NORMAL = 1
SUDOKU_GRID_BORDER_THICKNESS_BOLD = 2.5
NUMBER_PALETTE_BUTTON_SIZE = 40

USER_ENTERED_COLOR = ft.Colors.ORANGE_ACCENT_700
INITIAL_NUMBER_COLOR = ft.Colors.BLACK87
HINT_COLOR = ft.Colors.BLUE_ACCENT_700
CONFLICT_BORDER_COLOR = ft.Colors.RED_ACCENT_700
DEFAULT_BORDER_COLOR = ft.Colors.BLACK54
SELECTED_CELL_BG_COLOR = ft.Colors.LIGHT_BLUE_ACCENT_100
INITIAL_CELL_BG_COLOR = ft.Colors.BLUE_GREY_50
NORMAL_CELL_BG_COLOR = ft.Colors.WHITE
SOLUTION_SHOWN_COLOR = ft.Colors.GREEN_ACCENT_700

DIFFICULTY_LABELS = {"easy": "Easy", "medium": "Medium", "hard": "Hard"}


def format_elapsed(seconds):
    minutes, secs = divmod(max(0, int(seconds)), 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


def leaderboard_rows(entries):
    """(rank, username, formatted time) tuples, in the order the scoring service ranked them."""
    return [(rank, entry["username"], format_elapsed(entry["time_spent"]))
            for rank, entry in enumerate(entries, start=1)]


def _cell_border(r, c, color):
    return ft.border.Border(
        top=ft.border.BorderSide(SUDOKU_GRID_BORDER_THICKNESS_BOLD if r % BOX_SIZE == 0 else SUDOKU_GRID_BORDER_THICKNESS_NORMAL, color),
        left=ft.border.BorderSide(SUDOKU_GRID_BORDER_THICKNESS_BOLD if c % BOX_SIZE == 0 else SUDOKU_GRID_BORDER_THICKNESS_NORMAL, color),
        right=ft.border.BorderSide(SUDOKU_GRID_BORDER_THICKNESS_BOLD if c % BOX_SIZE == BOX_SIZE - 1 else SUDOKU_GRID_BORDER_THICKNESS_NORMAL, color),
        bottom=ft.border.BorderSide(SUDOKU_GRID_BORDER_THICKNESS_BOLD if r % BOX_SIZE == BOX_SIZE - 1 else SUDOKU_GRID_BORDER_THICKNESS_NORMAL, color),
    )


# --- LEADERBOARD VIEW ---
def leaderboard_view(page: ft.Page, game_ref: dict, go_back_fn):
    title_text = ft.Text("🏆 Leaderboard", size=FONT_SIZE_TITLE, weight=ft.FontWeight.BOLD)
    status_text = ft.Text("", size=FONT_SIZE_NORMAL, text_align=ft.TextAlign.CENTER)
    table_column = ft.Column(horizontal_alignment=ft.CrossAxisAlignment.CENTER, spacing=4)
    difficulty_dropdown = ft.Dropdown(
        label="Difficulty",
        options=[ft.dropdown.Option(level, DIFFICULTY_LABELS[level]) for level in DIFFICULTY_LEVELS],
        value=game_ref["leaderboard_difficulty"], width=200,
        on_change=lambda e: process_sudoku_action(game_ref, "FETCH_LEADERBOARD", {"difficulty": e.control.value}),
    )

    def refresh(snapshot=None):
        snapshot = snapshot or get_game_snapshot(game_ref)
        table_column.controls.clear()
        if snapshot["leaderboard_loading"]:
            status_text.value = "Loading..."
        elif not snapshot["leaderboard"]:
            status_text.value = "No scores yet. Be the first!"
        else:
            status_text.value = ""
        for rank, username, time_text in leaderboard_rows(snapshot["leaderboard"]):
            table_column.controls.append(ft.Row([
                ft.Text(f"{rank}.", width=40, size=FONT_SIZE_MEDIUM),
                ft.Text(username, width=180, size=FONT_SIZE_MEDIUM),
                ft.Text(time_text, width=80, size=FONT_SIZE_MEDIUM, text_align=ft.TextAlign.END),
            ], alignment=ft.MainAxisAlignment.CENTER))
        difficulty_dropdown.value = snapshot["leaderboard_difficulty"]

    def on_leaderboard_update(message):
        if message.get("type") == "TIMER_TICK":
            return
        refresh()
        if page.client_storage:
            page.update()

    refresh()

    content = ft.Column([
        ft.Row([
            title_text,
            ft.IconButton(ft.Icons.ARROW_BACK_ROUNDED, tooltip="Back to the game", on_click=lambda e: go_back_fn(), icon_size=TITLE_ICON_SIZE),
        ], alignment=ft.MainAxisAlignment.SPACE_BETWEEN),
        difficulty_dropdown, status_text, table_column,
    ], horizontal_alignment=ft.CrossAxisAlignment.CENTER, spacing=10, scroll=ft.ScrollMode.ADAPTIVE)
    return [ft.Container(content=content, expand=True, alignment=ft.alignment.top_center, padding=10)], on_leaderboard_update


# --- GAME VIEW ---
def sudoku_game_entry(page: ft.Page, game_ref: dict, show_leaderboard_fn):
    view_state = {"selected_cell_coord": None}

    status_text = ft.Text(size=FONT_SIZE_LARGE, text_align=ft.TextAlign.CENTER)
    timer_text = ft.Text("00:00", size=FONT_SIZE_LARGE, weight=ft.FontWeight.BOLD)
    eligibility_text = ft.Text(size=FONT_SIZE_NORMAL)
    sudoku_grid_container = ft.Column(spacing=0, horizontal_alignment=ft.CrossAxisAlignment.CENTER)
    number_palette = ft.Column(visible=False, horizontal_alignment=ft.CrossAxisAlignment.CENTER, spacing=5)
    action_area = ft.Column(horizontal_alignment=ft.CrossAxisAlignment.CENTER, spacing=10)
    username_input = ft.TextField(label="Your name", width=220, text_align=ft.TextAlign.CENTER, border_radius=STANDARD_BORDER_RADIUS, max_length=30)
    difficulty_dropdown = ft.Dropdown(
        label="Difficulty",
        options=[ft.dropdown.Option(level, DIFFICULTY_LABELS[level]) for level in DIFFICULTY_LEVELS],
        value=game_ref["difficulty"], width=160,
    )
    text_controls = [[None for _ in range(9)] for _ in range(9)]
    cell_containers = [[None for _ in range(9)] for _ in range(9)]

    def send(action_type, payload=None):
        process_sudoku_action(game_ref, action_type, payload or {})

    def update_cell_display(r, c, value, is_initial, is_selected, is_conflicting, is_hint, is_solution_shown):
        cell_text_control = text_controls[r][c]
        cell_text_control.value = str(value) if value != 0 else ""
        if is_initial:
            cell_text_control.color = INITIAL_NUMBER_COLOR
            cell_text_control.weight = ft.FontWeight.BOLD
        elif is_solution_shown:
            cell_text_control.color = SOLUTION_SHOWN_COLOR
            cell_text_control.weight = ft.FontWeight.BOLD
        elif is_hint:
            cell_text_control.color = HINT_COLOR
            cell_text_control.weight = ft.FontWeight.BOLD
        else:
            cell_text_control.color = USER_ENTERED_COLOR
            cell_text_control.weight = ft.FontWeight.NORMAL

        cell_container = cell_containers[r][c]
        if is_selected:
            cell_container.bgcolor = SELECTED_CELL_BG_COLOR
        elif is_initial:
            cell_container.bgcolor = INITIAL_CELL_BG_COLOR
        else:
            cell_container.bgcolor = NORMAL_CELL_BG_COLOR
        cell_container.border = _cell_border(r, c, CONFLICT_BORDER_COLOR if is_conflicting else DEFAULT_BORDER_COLOR)

    def create_sudoku_grid_ui():
        sudoku_grid_container.controls.clear()
        grid_rows = []
        for r_idx in range(9):
            row_controls = []
            for c_idx in range(9):
                cell_text = ft.Text(size=FONT_SIZE_XLARGE, text_align=ft.TextAlign.CENTER)
                text_controls[r_idx][c_idx] = cell_text
                cell_container = ft.Container(
                    content=cell_text,
                    width=SUDOKU_CELL_SIZE, height=SUDOKU_CELL_SIZE,
                    alignment=ft.alignment.center, data=(r_idx, c_idx),
                    on_click=lambda e, r=r_idx, c=c_idx: handle_cell_click(r, c),
                    border=_cell_border(r_idx, c_idx, DEFAULT_BORDER_COLOR),
                )
                cell_containers[r_idx][c_idx] = cell_container
                row_controls.append(cell_container)
            grid_rows.append(ft.Row(row_controls, spacing=0, alignment=ft.MainAxisAlignment.CENTER))
        sudoku_grid_container.controls.extend(grid_rows)

    def create_number_palette():
        def palette_button(num):
            return ft.ElevatedButton(
                str(num), on_click=lambda e: handle_palette_number_click(num),
                width=NUMBER_PALETTE_BUTTON_SIZE, height=NUMBER_PALETTE_BUTTON_SIZE,
                style=ft.ButtonStyle(padding=0),
            )

        clear_btn = ft.ElevatedButton(
            content=ft.Icon(ft.Icons.BACKSPACE_OUTLINED, size=NUMBER_PALETTE_BUTTON_SIZE * 0.6),
            on_click=lambda e: handle_palette_number_click(0),
            width=NUMBER_PALETTE_BUTTON_SIZE, height=NUMBER_PALETTE_BUTTON_SIZE,
            tooltip="Clear cell", style=ft.ButtonStyle(padding=0),
        )
        number_palette.controls.extend([
            ft.Row([palette_button(i) for i in range(1, 6)], alignment=ft.MainAxisAlignment.CENTER, spacing=5),
            ft.Row([palette_button(i) for i in range(6, 10)] + [clear_btn], alignment=ft.MainAxisAlignment.CENTER, spacing=5),
        ])

    def handle_cell_click(r, c):
        snapshot = get_game_snapshot(game_ref)
        if snapshot["activity"] != Activity.ACTIVE or game_ref["session"].is_locked(r, c) \
                or view_state["selected_cell_coord"] == (r, c):
            view_state["selected_cell_coord"] = None
        else:
            view_state["selected_cell_coord"] = (r, c)
        refresh_ui(snapshot)
        if page.client_storage:
            page.update()

    def handle_palette_number_click(num):
        selected_coord = view_state["selected_cell_coord"]
        if selected_coord:
            r, c = selected_coord
            send("EDIT_CELL", {"row": r, "col": c, "value": num})

    solve_dialog = ft.AlertDialog(
        modal=True,
        title=ft.Text("Show the solution?"),
        content=ft.Text("The round ends and your time will not be ranked."),
        actions=[
            ft.TextButton("Show solution", on_click=lambda e: close_solve_dialog("CONFIRM_SOLVE")),
            ft.TextButton("Keep playing", on_click=lambda e: close_solve_dialog("CANCEL_SOLVE")),
        ],
    )

    def close_solve_dialog(action_type):
        page.close(solve_dialog)
        send(action_type)

    def build_action_area(snapshot):
        action_area.controls.clear()
        action_area.controls.append(ft.Row([
            difficulty_dropdown,
            ft.ElevatedButton("🔄 New game", on_click=lambda e: send("START_GAME", {"difficulty": difficulty_dropdown.value}),
                              height=BUTTON_HEIGHT_NORMAL, disabled=snapshot["loading_game"]),
        ], alignment=ft.MainAxisAlignment.CENTER))

        if snapshot["activity"] == Activity.ACTIVE:
            action_area.controls.append(ft.Row([
                ft.ElevatedButton("✅ Check", on_click=lambda e: send("CHECK_CONFLICTS"), height=BUTTON_HEIGHT_NORMAL),
                ft.ElevatedButton("💡 Hint", on_click=lambda e: send("HINT"), height=BUTTON_HEIGHT_NORMAL),
                ft.ElevatedButton("🏳️ Solve", on_click=lambda e: send("REQUEST_SOLVE"), height=BUTTON_HEIGHT_NORMAL, bgcolor=ft.Colors.AMBER_200),
            ], alignment=ft.MainAxisAlignment.CENTER))
        elif snapshot["activity"] == Activity.WON and snapshot["can_submit_score"] and not snapshot["score_submitted"]:
            action_area.controls.append(ft.Row([
                username_input,
                ft.ElevatedButton("Submit time", on_click=lambda e: send("SUBMIT_SCORE", {"username": username_input.value}),
                                  height=BUTTON_HEIGHT_NORMAL, disabled=snapshot["submitting_score"]),
            ], alignment=ft.MainAxisAlignment.CENTER))

        action_area.controls.append(
            ft.TextButton("🏆 Leaderboard", on_click=lambda e: show_leaderboard_fn(snapshot["difficulty"]))
        )

    def refresh_ui(snapshot=None):
        snapshot = snapshot or get_game_snapshot(game_ref)
        is_active = snapshot["activity"] == Activity.ACTIVE
        if not is_active:
            view_state["selected_cell_coord"] = None
        selected = view_state["selected_cell_coord"]
        is_solution_shown = snapshot["activity"] == Activity.STOPPED
        for r in range(9):
            for c in range(9):
                update_cell_display(
                    r, c, snapshot["board"][r][c],
                    is_initial=snapshot["initial"][r][c] != 0,
                    is_selected=selected == (r, c),
                    is_conflicting=(r, c) in snapshot["conflicts"],
                    is_hint=snapshot["last_hint"] == (r, c),
                    is_solution_shown=is_solution_shown,
                )
        sudoku_grid_container.visible = snapshot["activity"] != Activity.IDLE
        number_palette.visible = is_active and selected is not None
        status_text.value = snapshot["status_message"]
        timer_text.value = f"⏱ {format_elapsed(snapshot['elapsed'])}"
        eligibility_text.value = "Ranked round" if snapshot["eligible"] else "Unranked (assist used)"
        eligibility_text.color = ft.Colors.GREEN_700 if snapshot["eligible"] else ft.Colors.GREY_600
        build_action_area(snapshot)

        if snapshot["pending_confirmation"] == "solve" and not solve_dialog.open:
            page.open(solve_dialog)

    def on_game_update(message):
        if message.get("type") == "TIMER_TICK":
            timer_text.value = f"⏱ {format_elapsed(message.get('elapsed', 0))}"
        else:
            refresh_ui()
        if page.client_storage:
            page.update()

    create_sudoku_grid_ui()
    create_number_palette()
    refresh_ui()

    main_column = ft.Column([
        ft.Text("🧩 Sudoku", size=FONT_SIZE_TITLE, weight=ft.FontWeight.BOLD),
        ft.Row([timer_text, eligibility_text], alignment=ft.MainAxisAlignment.CENTER, spacing=20),
        status_text,
        sudoku_grid_container,
        number_palette,
        action_area,
    ], expand=True, scroll=ft.ScrollMode.ADAPTIVE, horizontal_alignment=ft.CrossAxisAlignment.CENTER, spacing=10)
    return [ft.Container(content=main_column, expand=True, alignment=ft.alignment.top_center, padding=ft.padding.all(10))], on_game_update
