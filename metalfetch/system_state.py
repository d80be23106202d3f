"""Collect the facts shown next to the logo into one immutable snapshot."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .errors import ProbeInvocationError, ProbeValueMissing
from .probes import (
    ProbeContext,
    Strategy,
    command_output,
    env_value,
    gsettings_value,
    os_release_name,
    package_count,
    shell_name,
)

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"


@dataclass(frozen=True)
class SystemSnapshot:
    name: str
    architecture: str
    kernel: str
    shell: str
    desktop: str
    packages: str
    uptime: str
    wm: str
    theme: str
    icons: str
    terminal: str


@dataclass(frozen=True)
class ProbeSpec:
    """One snapshot field and the strategies tried for it, in priority order.

    ``fail_fast`` decides what an invocation error does: abort the whole build,
    or count as a missing value and move on to the next strategy.
    """

    field: str
    strategies: Tuple[Strategy, ...]
    fail_fast: bool = False


_DESKTOP_STRATEGIES = (env_value("XDG_CURRENT_DESKTOP"), env_value("DESKTOP_SESSION"))

# Construction order, independent of the display order.
DEFAULT_PROBES: Tuple[ProbeSpec, ...] = (
    ProbeSpec("name", (os_release_name,), fail_fast=True),
    ProbeSpec("architecture", (command_output("uname", "-m"),), fail_fast=True),
    ProbeSpec("kernel", (command_output("uname", "-r"),), fail_fast=True),
    ProbeSpec("shell", (shell_name,)),
    ProbeSpec("desktop", _DESKTOP_STRATEGIES),
    ProbeSpec("packages", (package_count,), fail_fast=True),
    ProbeSpec("uptime", (command_output("uptime", "-p"),), fail_fast=True),
    ProbeSpec("wm", _DESKTOP_STRATEGIES),
    ProbeSpec("theme", (gsettings_value("gtk-theme"),)),
    ProbeSpec("icons", (gsettings_value("icon-theme"),)),
    ProbeSpec("terminal", (env_value("TERM"),)),
)


class ProbeRegistry:
    def __init__(self, probes: Sequence[ProbeSpec] = DEFAULT_PROBES, context: Optional[ProbeContext] = None) -> None:
        self._probes = tuple(probes)
        self._context = context or ProbeContext()

    def probe(self, spec: ProbeSpec) -> str:
        """First value any strategy yields, or ``UNKNOWN``; re-raises invocation errors of fail-fast probes."""
        for strategy in spec.strategies:
            try:
                return strategy(self._context)
            except ProbeValueMissing as exc:
                logger.debug("%s: %s", spec.field, exc)
            except ProbeInvocationError as exc:
                if spec.fail_fast:
                    raise
                logger.debug("%s: ignoring failed probe: %s", spec.field, exc)
        return UNKNOWN

    def build(self) -> SystemSnapshot:
        """Run every probe in order. Any fatal probe error aborts the whole snapshot."""
        values = {spec.field: self.probe(spec) for spec in self._probes}
        return SystemSnapshot(**values)


def gather_snapshot(context: Optional[ProbeContext] = None) -> SystemSnapshot:
    """Collect a snapshot of the current host."""
    return ProbeRegistry(context=context).build()
