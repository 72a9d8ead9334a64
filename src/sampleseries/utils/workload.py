"""Synthetic CPU cost used to emulate per-sample loading and validation work."""

DEFAULT_LOAD_WORK_UNITS = 100
DEFAULT_VALIDATE_WORK_UNITS = 500


def simulate_work(units: int) -> int:
    """Spin for ``units`` iterations and return the iteration count.

    The loop has no observable effect on sample data; it only consumes CPU
    time so cycle timings stay meaningful. ``units <= 0`` is a no-op.
    """
    done = 0
    for _ in range(units):
        done += 1
    return done
