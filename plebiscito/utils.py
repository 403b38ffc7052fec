import datetime
import sys
from typing import Optional


def say(msg, error: Optional[BaseException] = None):
    """Log a message to stderr with timestamp, optionally naming an exception."""
    d = datetime.datetime.now().replace(microsecond=0)
    if error is not None:
        msg = f'{msg}: {type(error).__name__}: {error}'
    sys.stderr.write(f'{d}: {str(msg)}\n')
    sys.stderr.flush()


def is_true(value) -> bool:
    """Interpret an environment flag such as DEV_MODE ('true', '1', 'yes')."""
    if value is None:
        return False
    return str(value).strip().lower() in ('true', '1', 'yes', 'on')


def split_list(value: Optional[str]) -> list[str]:
    """Split a comma-separated setting into its non-empty, stripped items."""
    if not value:
        return []
    return [item.strip() for item in value.split(',') if item.strip()]
