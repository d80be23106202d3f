"""Capabilities and per-field strategies used to probe the host.

A strategy takes a :class:`ProbeContext` and returns the field value. It raises
:class:`ProbeValueMissing` when its source has nothing usable and
:class:`ProbeInvocationError` when the source itself could not be queried. Whether
an invocation error is fatal is decided by the registry, not here.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Mapping, Optional, Sequence, Tuple

from .errors import ProbeInvocationError, ProbeValueMissing

logger = logging.getLogger(__name__)

OS_RELEASE_PATH = Path("/etc/os-release")
OS_NAME_KEY = "PRETTY_NAME="
GSETTINGS_SCHEMA = "org.gnome.desktop.interface"

# Priority order; only the first manager found on PATH is queried.
PACKAGE_MANAGERS: Tuple[Tuple[str, str], ...] = (
    ("pacman", "-Qq"),
    ("apt", "list --installed"),
    ("dnf", "list installed"),
    ("yum", "list installed"),
    ("zypper", "se --installed-only"),
    ("emerge", "-Q"),
    ("xbps-query", "-l"),
)


@dataclass(frozen=True)
class CommandResult:
    stdout: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


CommandRunner = Callable[[str, Sequence[str]], CommandResult]


def run_command(program: str, args: Sequence[str]) -> CommandResult:
    """Run ``program`` to completion and capture its stdout as UTF-8 text.

    The exit status is not inspected. Spawn and decode failures are reported
    through ``CommandResult.error`` rather than raised.
    """
    try:
        completed = subprocess.run([program, *args], capture_output=True, check=False)
    except OSError as exc:
        return CommandResult(error=f"could not run {program}: {exc}")
    try:
        stdout = completed.stdout.decode("utf-8")
    except UnicodeDecodeError as exc:
        return CommandResult(error=f"output of {program} is not valid UTF-8: {exc}")
    return CommandResult(stdout=stdout)


@dataclass(frozen=True)
class ProbeContext:
    """Everything a strategy may read. Tests substitute each capability."""

    env: Mapping[str, str] = field(default_factory=lambda: os.environ)
    run: CommandRunner = run_command
    which: Callable[[str], Optional[str]] = shutil.which
    os_release: Path = OS_RELEASE_PATH


Strategy = Callable[[ProbeContext], str]


def _invoke(context: ProbeContext, program: str, *args: str) -> str:
    result = context.run(program, args)
    if not result.ok:
        raise ProbeInvocationError(result.error)
    return result.stdout


def os_release_name(context: ProbeContext) -> str:
    """Quoted ``PRETTY_NAME`` value from the release file."""
    try:
        content = context.os_release.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ProbeInvocationError(f"could not read {context.os_release}: {exc}") from exc
    for line in content.splitlines():
        if line.startswith(OS_NAME_KEY):
            name = line.split("=")[1].strip('"')
            if name:
                return name
            break
    raise ProbeValueMissing(f"no {OS_NAME_KEY[:-1]} in {context.os_release}")


def command_output(program: str, *args: str) -> Strategy:
    """Strategy returning the trimmed stdout of ``program args``."""

    def strategy(context: ProbeContext) -> str:
        output = _invoke(context, program, *args).strip()
        if not output:
            raise ProbeValueMissing(f"{program} printed nothing")
        return output

    strategy.__name__ = f"command_output[{program}]"
    return strategy


def env_value(name: str) -> Strategy:
    """Strategy returning an environment variable; empty counts as unset."""

    def strategy(context: ProbeContext) -> str:
        value = context.env.get(name)
        if not value:
            raise ProbeValueMissing(f"${name} is not set")
        return value

    strategy.__name__ = f"env_value[{name}]"
    return strategy


def shell_name(context: ProbeContext) -> str:
    """Final path segment of ``$SHELL``."""
    name = env_value("SHELL")(context).split("/")[-1]
    if not name:
        raise ProbeValueMissing("$SHELL has no final path segment")
    return name


def gsettings_value(key: str) -> Strategy:
    """Strategy reading a GNOME interface setting such as ``gtk-theme``."""

    def strategy(context: ProbeContext) -> str:
        value = _invoke(context, "gsettings", "get", GSETTINGS_SCHEMA, key).strip().strip("'")
        if not value or value == "Unknown":
            raise ProbeValueMissing(f"gsettings has no {key}")
        return value

    strategy.__name__ = f"gsettings_value[{key}]"
    return strategy


def package_count(context: ProbeContext) -> str:
    """Installed package count from the first package manager found on PATH."""
    for manager, query in PACKAGE_MANAGERS:
        if context.which(manager) is None:
            continue
        logger.debug("Counting packages with %s %s", manager, query)
        lines = _invoke(context, manager, *query.split()).split("\n")
        if lines[-1] == "":
            lines.pop()
        if not lines:
            raise ProbeValueMissing(f"{manager} listed no packages")
        return f"{len(lines)} ({manager})"
    raise ProbeValueMissing("no known package manager on PATH")
