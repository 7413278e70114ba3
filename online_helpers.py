# online_helpers.py
import threading


class GameTimer:
    """
    Elapsed-seconds counter for one round.

    Every start() opens a new "generation". The ticker thread only increments while its
    generation is still the current one, and the check happens under the same lock that
    stop() takes, so once stop() returns the counter cannot move again.
    """

    def __init__(self, interval=1.0, on_tick=None, name="sudoku"):
        self.interval = interval
        self.on_tick = on_tick
        self.name = name
        self._lock = threading.Lock()
        self._elapsed = 0
        self._running = False
        self._generation = 0
        self._stop_event = None
        self._thread = None

    @property
    def elapsed(self):
        with self._lock:
            return self._elapsed

    @property
    def running(self):
        with self._lock:
            return self._running

    def start(self, reset=False, background=True):
        # A second start must not leave the previous ticker alive (it would double the rate)
        self.stop()
        with self._lock:
            if reset:
                self._elapsed = 0
            self._generation += 1
            self._running = True
            generation = self._generation
            started_at = self._elapsed
            if not background:
                return
            stop_event = threading.Event()
            self._stop_event = stop_event

        thread = threading.Thread(target=self._run, args=(generation, stop_event), daemon=True)
        self._thread = thread
        thread.start()
        print(f"Sudoku timer ({self.name}): started at {started_at}s, interval {self.interval}s.")

    def stop(self):
        with self._lock:
            if not self._running:
                return
            self._running = False
            self._generation += 1
            stop_event = self._stop_event
            self._stop_event = None
            final_value = self._elapsed
        if stop_event is not None:
            stop_event.set()
        print(f"Sudoku timer ({self.name}): stopped at {final_value}s.")

    def tick(self):
        """Advances by one second if running. Returns True when the counter moved."""
        with self._lock:
            generation = self._generation
        return self._advance(generation)

    def _advance(self, generation):
        with self._lock:
            if not self._running or generation != self._generation:
                return False
            self._elapsed += 1
            value = self._elapsed
        if self.on_tick:
            self.on_tick(value)
        return True

    def _run(self, generation, stop_event):
        while not stop_event.wait(self.interval):
            if not self._advance(generation):
                return


def run_in_background(task, on_success, on_error, name="sudoku-request"):
    """
    Runs `task()` on a daemon thread and reports back through one of the callbacks.
    Only exceptions are routed to `on_error`; callbacks run on the worker thread.
    """
    def worker():
        try:
            result = task()
        except Exception as exc:
            print(f"Background task '{name}' failed: {exc}")
            on_error(exc)
            return
        on_success(result)

    thread = threading.Thread(target=worker, daemon=True, name=name)
    thread.start()
    return thread
