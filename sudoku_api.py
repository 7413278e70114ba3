# sudoku_api.py
import os

import requests

from sudoku_utils import PuzzleSpec

API_URL = os.environ.get("SUDOKU_API_URL", "https://sudokuapi-rlim.onrender.com").rstrip("/")
REQUEST_TIMEOUT_SECONDS = float(os.environ.get("SUDOKU_API_TIMEOUT", 10))


class SudokuApiError(Exception):
    """Raised when the puzzle oracle or the scoring service cannot be used."""


def _error_detail(response):
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict) and body.get("error"):
        return body["error"]
    return str(body)[:200]


class SudokuApiClient:
    def __init__(self, base_url=API_URL, timeout=REQUEST_TIMEOUT_SECONDS, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = session or requests.Session()

    def _request(self, method, path, **kwargs):
        url = f"{self.base_url}{path}"
        try:
            response = self.http.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            print(f"Sudoku API: {method} {path} failed: {exc}")
            raise SudokuApiError(f"Could not reach the server ({exc.__class__.__name__}).") from exc

        if not response.ok:
            detail = _error_detail(response)
            print(f"Sudoku API: {method} {path} returned {response.status_code}: {detail}")
            raise SudokuApiError(f"Server error {response.status_code}: {detail}")

        try:
            return response.json()
        except ValueError as exc:
            raise SudokuApiError(f"Invalid JSON from {path}.") from exc

    def fetch_new_game(self, level):
        payload = self._request("GET", "/api/new-game", params={"level": level})
        try:
            return PuzzleSpec.from_payload(payload, difficulty=level)
        except ValueError as exc:
            print(f"Sudoku API: malformed new-game payload for '{level}': {exc}")
            raise SudokuApiError(f"Malformed puzzle from server: {exc}") from exc

    def submit_score(self, username, difficulty, time_spent):
        body = {"username": username, "difficulty": difficulty, "time_spent": int(time_spent)}
        return self._request("POST", "/api/submit-score", json=body)

    def fetch_leaderboard(self, difficulty):
        payload = self._request("GET", "/api/leaderboard", params={"difficulty": difficulty})
        if not isinstance(payload, dict):
            raise SudokuApiError("Invalid leaderboard payload.")
        # The service sends null for an empty board
        rows = payload.get("leaderboard") or []
        entries = []
        for row in rows:
            try:
                entries.append({"username": str(row["username"]), "time_spent": int(row["time_spent"])})
            except (KeyError, TypeError, ValueError) as exc:
                raise SudokuApiError(f"Invalid leaderboard entry: {row!r}") from exc
        return entries
