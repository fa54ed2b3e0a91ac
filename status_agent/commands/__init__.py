"""
Host Status Agent - Commands Package

Bounded execution of external diagnostic binaries.
"""

from .runner import CommandResult, TIMEOUT_EXIT_CODE, run, run_checked

__all__ = ["CommandResult", "TIMEOUT_EXIT_CODE", "run", "run_checked"]
