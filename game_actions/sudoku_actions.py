# game_actions/sudoku_actions.py
import os
import threading

from online_helpers import GameTimer, run_in_background
from sudoku_api import SudokuApiClient
from sudoku_session import Activity, SessionState
from sudoku_utils import DEFAULT_DIFFICULTY, DIFFICULTY_LEVELS

CONFLICT_DISPLAY_SECONDS = float(os.environ.get("SUDOKU_CONFLICT_DISPLAY_SECONDS", 3))
MAX_USERNAME_LENGTH = 30


def _schedule_timer(delay_seconds, callback):
    timer = threading.Timer(delay_seconds, callback)
    timer.daemon = True
    timer.start()
    return timer


def create_game_ref(api_client=None, run_async=run_in_background, schedule=_schedule_timer,
                    on_update=None, timer_interval=1.0, background_timer=True,
                    conflict_display_seconds=CONFLICT_DISPLAY_SECONDS, rng=None):
    """
    Everything one player's page needs: the current session plus the bookkeeping around
    the oracle / scoring calls. All changes go through process_sudoku_action.
    """
    game_ref = {
        "lock": threading.RLock(),
        "session": None,
        "api": api_client or SudokuApiClient(),
        "run_async": run_async,
        "schedule": schedule,
        "on_update": on_update,
        "timer_interval": timer_interval,
        "background_timer": background_timer,
        "conflict_display_seconds": conflict_display_seconds,
        "rng": rng,
        "difficulty": DEFAULT_DIFFICULTY,
        "status_message": "Choose a difficulty to start.",
        "last_error": None,
        "game_request_id": 0,
        "loading_game": False,
        "pending_confirmation": None,
        "conflict_check_id": 0,
        "conflict_expiry": None,
        "submitting_score": False,
        "score_submitted": False,
        "leaderboard_request_id": 0,
        "leaderboard_loading": False,
        "leaderboard_difficulty": DEFAULT_DIFFICULTY,
        "leaderboard": [],
        "closed": False,
    }
    game_ref["session"] = _new_session(game_ref)
    return game_ref


def _new_session(game_ref):
    def on_tick(elapsed):
        _send_update(game_ref, "TIMER_TICK", elapsed=elapsed)

    timer = GameTimer(interval=game_ref["timer_interval"], on_tick=on_tick)
    return SessionState(timer=timer, rng=game_ref["rng"])


def _send_update(game_ref, msg_type, **extra):
    on_update = game_ref.get("on_update")
    if on_update:
        on_update({"type": msg_type, **extra})


def _cancel_conflict_expiry(game_ref):
    pending = game_ref.get("conflict_expiry")
    if pending is not None:
        pending.cancel()
    game_ref["conflict_expiry"] = None


def _win_message(session):
    if session.eligible:
        return f"🎉 Solved in {session.elapsed}s! Enter your name to submit your time."
    return f"🎉 Solved in {session.elapsed}s. Assists were used, so this time is not ranked."


def get_game_snapshot(game_ref):
    with game_ref["lock"]:
        snapshot = game_ref["session"].snapshot()
        for key in ("difficulty", "status_message", "last_error", "loading_game", "pending_confirmation",
                    "submitting_score", "score_submitted", "leaderboard_loading", "leaderboard_difficulty"):
            snapshot[key] = game_ref[key]
        if game_ref["session"].difficulty:
            snapshot["difficulty"] = game_ref["session"].difficulty
        snapshot["leaderboard"] = [dict(entry) for entry in game_ref["leaderboard"]]
        return snapshot


def process_sudoku_action(game_ref: dict, action_type: str, payload: dict = None) -> bool:
    payload = payload or {}
    with game_ref["lock"]:
        return _process_locked(game_ref, action_type, payload)


def _process_locked(game_ref, action_type, payload):
    session = game_ref["session"]
    action_processed = True
    send_full_update = False
    follow_up = None  # background call to issue once state is settled

    if action_type not in ("EDIT_CELL", "CONFLICTS_EXPIRED"):
        print(f"Sudoku: processing {action_type} (activity={session.activity})")

    if action_type == "START_GAME":
        difficulty = payload.get("difficulty", game_ref["difficulty"])
        if difficulty not in DIFFICULTY_LEVELS:
            game_ref["status_message"] = f"Unknown difficulty '{difficulty}'."
            action_processed = False
        else:
            game_ref["game_request_id"] += 1
            request_id = game_ref["game_request_id"]
            game_ref["difficulty"] = difficulty
            game_ref["loading_game"] = True
            game_ref["status_message"] = f"Loading a new {difficulty} puzzle..."
            api = game_ref["api"]

            def follow_up():
                game_ref["run_async"](
                    lambda: api.fetch_new_game(difficulty),
                    lambda spec: process_sudoku_action(game_ref, "NEW_GAME_LOADED", {"request_id": request_id, "spec": spec}),
                    lambda exc: process_sudoku_action(game_ref, "NEW_GAME_FAILED", {"request_id": request_id, "error": str(exc)}),
                )
        send_full_update = True

    elif action_type == "NEW_GAME_LOADED":
        if payload.get("request_id") != game_ref["game_request_id"]:
            print(f"Sudoku: discarding stale new-game response {payload.get('request_id')} (latest is {game_ref['game_request_id']}).")
            return False
        session.stop_timer()
        _cancel_conflict_expiry(game_ref)
        new_session = _new_session(game_ref)
        spec = payload["spec"]
        new_session.start_game(spec, background_timer=game_ref["background_timer"])
        game_ref["session"] = new_session
        game_ref["difficulty"] = spec.difficulty
        game_ref["loading_game"] = False
        game_ref["last_error"] = None
        game_ref["pending_confirmation"] = None
        game_ref["submitting_score"] = False
        game_ref["score_submitted"] = False
        game_ref["status_message"] = f"Good luck! New {spec.difficulty} game started."
        send_full_update = True

    elif action_type == "NEW_GAME_FAILED":
        if payload.get("request_id") != game_ref["game_request_id"]:
            print(f"Sudoku: ignoring failure of stale new-game request {payload.get('request_id')}.")
            return False
        game_ref["loading_game"] = False
        game_ref["last_error"] = payload.get("error")
        game_ref["status_message"] = "⚠️ Could not load a new game. Check your connection and try again."
        send_full_update = True

    elif action_type == "EDIT_CELL":
        action_processed = session.edit_cell(payload.get("row"), payload.get("col"), payload.get("value"))
        if action_processed:
            if session.activity == Activity.WON:
                _cancel_conflict_expiry(game_ref)
                game_ref["status_message"] = _win_message(session)
            send_full_update = True

    elif action_type == "CHECK_CONFLICTS":
        if session.activity == Activity.ACTIVE:
            conflicts = session.check_conflicts()
            _cancel_conflict_expiry(game_ref)
            game_ref["conflict_check_id"] += 1
            check_id = game_ref["conflict_check_id"]
            if conflicts:
                game_ref["status_message"] = f"⚠️ {len(conflicts)} cell(s) don't match the solution."
                delay = game_ref["conflict_display_seconds"]
                if delay > 0:
                    game_ref["conflict_expiry"] = game_ref["schedule"](
                        delay, lambda: process_sudoku_action(game_ref, "CONFLICTS_EXPIRED", {"check_id": check_id})
                    )
            else:
                game_ref["status_message"] = "✅ No mistakes so far."
            send_full_update = True
        else:
            action_processed = False

    elif action_type == "CONFLICTS_EXPIRED":
        if payload.get("check_id") == game_ref["conflict_check_id"]:
            session.clear_conflicts()
            game_ref["conflict_expiry"] = None
            send_full_update = True
        else:
            action_processed = False

    elif action_type == "HINT":
        cell = session.hint()
        if cell is None:
            action_processed = False
        else:
            r, c = cell
            if session.activity == Activity.WON:
                _cancel_conflict_expiry(game_ref)
                game_ref["status_message"] = _win_message(session)
            else:
                game_ref["status_message"] = f"💡 Revealed row {r + 1}, column {c + 1}. This round is no longer ranked."
            send_full_update = True

    elif action_type == "REQUEST_SOLVE":
        if session.activity == Activity.ACTIVE:
            game_ref["pending_confirmation"] = "solve"
            send_full_update = True
        else:
            action_processed = False

    elif action_type == "CONFIRM_SOLVE":
        if game_ref["pending_confirmation"] == "solve":
            game_ref["pending_confirmation"] = None
            action_processed = session.confirm_and_solve()
            if action_processed:
                _cancel_conflict_expiry(game_ref)
                game_ref["status_message"] = "🏳️ Here is the solution. Start a new game to play again."
            send_full_update = True
        else:
            action_processed = False

    elif action_type == "CANCEL_SOLVE":
        action_processed = game_ref["pending_confirmation"] is not None
        game_ref["pending_confirmation"] = None
        send_full_update = action_processed

    elif action_type == "SUBMIT_SCORE":
        username = str(payload.get("username") or "").strip()
        if not session.can_submit_score:
            game_ref["status_message"] = "This round can't be submitted."
            action_processed = False
        elif game_ref["score_submitted"] or game_ref["submitting_score"]:
            game_ref["status_message"] = "Your time has already been sent."
            action_processed = False
        elif not username or len(username) > MAX_USERNAME_LENGTH:
            game_ref["status_message"] = f"Enter a name (1-{MAX_USERNAME_LENGTH} characters)."
            action_processed = False
        else:
            game_ref["submitting_score"] = True
            game_ref["status_message"] = "Submitting your time..."
            api = game_ref["api"]
            difficulty = session.difficulty
            time_spent = session.elapsed

            def follow_up():
                game_ref["run_async"](
                    lambda: api.submit_score(username, difficulty, time_spent),
                    lambda ack: process_sudoku_action(game_ref, "SCORE_SUBMITTED", {"session": session}),
                    lambda exc: process_sudoku_action(game_ref, "SCORE_SUBMIT_FAILED", {"session": session, "error": str(exc)}),
                )
        send_full_update = True

    elif action_type == "SCORE_SUBMITTED":
        if payload.get("session") is not session:
            print("Sudoku: score acknowledgement arrived for a replaced session, ignoring.")
            return False
        game_ref["submitting_score"] = False
        game_ref["score_submitted"] = True
        game_ref["status_message"] = "🏆 Score saved!"
        _send_update(game_ref, "GAME_STATE_UPDATE")
        if game_ref["closed"]:
            return True
        return process_sudoku_action(game_ref, "FETCH_LEADERBOARD", {"difficulty": session.difficulty})

    elif action_type == "SCORE_SUBMIT_FAILED":
        if payload.get("session") is not session:
            return False
        # Win and eligibility stay as they are so the player can retry
        game_ref["submitting_score"] = False
        game_ref["last_error"] = payload.get("error")
        game_ref["status_message"] = "⚠️ Could not submit your score. Please try again."
        send_full_update = True

    elif action_type == "FETCH_LEADERBOARD":
        difficulty = payload.get("difficulty") or game_ref["leaderboard_difficulty"]
        if difficulty not in DIFFICULTY_LEVELS:
            game_ref["status_message"] = f"Unknown difficulty '{difficulty}'."
            action_processed = False
        else:
            game_ref["leaderboard_request_id"] += 1
            request_id = game_ref["leaderboard_request_id"]
            game_ref["leaderboard_difficulty"] = difficulty
            game_ref["leaderboard_loading"] = True
            api = game_ref["api"]

            def follow_up():
                game_ref["run_async"](
                    lambda: api.fetch_leaderboard(difficulty),
                    lambda entries: process_sudoku_action(game_ref, "LEADERBOARD_LOADED", {"request_id": request_id, "entries": entries}),
                    lambda exc: process_sudoku_action(game_ref, "LEADERBOARD_FAILED", {"request_id": request_id, "error": str(exc)}),
                )
        send_full_update = True

    elif action_type == "LEADERBOARD_LOADED":
        if payload.get("request_id") != game_ref["leaderboard_request_id"]:
            print(f"Sudoku: discarding stale leaderboard response {payload.get('request_id')}.")
            return False
        game_ref["leaderboard_loading"] = False
        game_ref["leaderboard"] = list(payload.get("entries") or [])
        send_full_update = True

    elif action_type == "LEADERBOARD_FAILED":
        if payload.get("request_id") != game_ref["leaderboard_request_id"]:
            return False
        game_ref["leaderboard_loading"] = False
        game_ref["last_error"] = payload.get("error")
        game_ref["status_message"] = "⚠️ Could not load the leaderboard."
        send_full_update = True

    elif action_type == "LEAVE_GAME":
        session.stop_timer()
        _cancel_conflict_expiry(game_ref)
        # Responses still in flight must not resurrect a round on a closed page
        game_ref["game_request_id"] += 1
        game_ref["leaderboard_request_id"] += 1
        game_ref["loading_game"] = False
        game_ref["leaderboard_loading"] = False
        game_ref["closed"] = True

    else:
        action_processed = False
        print(f"Sudoku: unknown action type '{action_type}'.")

    if send_full_update:
        _send_update(game_ref, "GAME_STATE_UPDATE")
    if follow_up is not None:
        if game_ref["closed"]:
            print(f"Sudoku: page closed, not sending the request for {action_type}.")
        else:
            follow_up()
    return action_processed
