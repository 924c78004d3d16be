"""Bounded external command execution for status probes."""

from __future__ import annotations

import subprocess
from typing import Callable

from .models import SamplerError


CommandRunner = Callable[..., str]


def run_command(cmd: str, *args: str, timeout_s: float = 1.0) -> str:
    """Run a command and return its trimmed stdout.

    Raises ``SamplerError`` when the command is missing, exits non-zero or
    does not finish within ``timeout_s``.
    """
    try:
        out = subprocess.run(
            [cmd, *args],
            capture_output=True,
            text=True,
            timeout=timeout_s,
            check=False,
        )
    except FileNotFoundError as exc:
        raise SamplerError(f"Command {cmd} not found") from exc
    except subprocess.TimeoutExpired as exc:
        raise SamplerError(f"Command {cmd} timed out after {timeout_s:0.2f}s") from exc
    except OSError as exc:
        raise SamplerError(f"Command {cmd} could not start: {exc}") from exc

    if out.returncode != 0:
        raise SamplerError(f"Command {cmd} failed, error: {out.stderr.strip()}")
    return out.stdout.strip()
