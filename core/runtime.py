"""Runtime helpers shared by the CLI and the report builder.

Plain functions for the generation timestamp printed on every page and
for preparing the output folder.
"""

from datetime import datetime, timezone
from pathlib import Path

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M UTC"


def timestamp_utc(dt=None):
    """Return the report timestamp, e.g. ``2020-12-31 18:05 UTC``."""

    dt = dt or datetime.now(timezone.utc)
    return dt.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def prepare_output_dir(path, *subdirs):
    """Create ``path`` (and ``path/subdir`` for each subdir); return ``path``."""

    root = Path(path)
    root.mkdir(parents=True, exist_ok=True)
    for name in subdirs:
        (root / name).mkdir(parents=True, exist_ok=True)
    return root
