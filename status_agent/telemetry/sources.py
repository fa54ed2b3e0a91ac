"""
Host Status Agent - Pseudo-file Reader

procfs/sysfs entries reflect live kernel state, so every call re-reads them.
"""

from pathlib import Path
from typing import Union

from status_agent.errors import SourceMissingError, SourceUnreadableError


def read_text(path: Union[str, Path]) -> str:
    """Read a small text file, telling "absent" apart from "unreadable"."""
    path = Path(path)
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError as e:
        raise SourceMissingError(str(path), "no such file") from e
    except OSError as e:
        raise SourceUnreadableError(str(path), e.strerror or str(e)) from e
