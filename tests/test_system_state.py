import subprocess

import pytest

from metalfetch import probes
from metalfetch.errors import ProbeInvocationError, ProbeValueMissing
from metalfetch.probes import CommandResult, ProbeContext, run_command
from metalfetch.system_state import UNKNOWN, ProbeRegistry, ProbeSpec, SystemSnapshot

OS_RELEASE = 'NAME="Arch Linux"\nPRETTY_NAME="Arch Linux"\nID=arch\n'


class FakeRunner:
    """Returns canned output per command line; anything else fails to spawn."""

    def __init__(self, outputs):
        self.outputs = outputs
        self.calls = []

    def __call__(self, program, args):
        command = " ".join([program, *args])
        self.calls.append(command)
        if command not in self.outputs:
            return CommandResult(error=f"could not run {program}: No such file or directory")
        output = self.outputs[command]
        return output if isinstance(output, CommandResult) else CommandResult(stdout=output)


def make_context(tmp_path, *, env=None, outputs=None, managers=(), os_release=OS_RELEASE):
    release = tmp_path / "os-release"
    if os_release is not None:
        release.write_text(os_release)
    default_outputs = {
        "uname -m": "x86_64\n",
        "uname -r": "6.9.1-arch1-1\n",
        "uptime -p": "up 2 hours, 5 minutes\n",
    }
    if outputs:
        default_outputs.update(outputs)
    runner = FakeRunner(default_outputs)
    context = ProbeContext(
        env={} if env is None else env,
        run=runner,
        which=lambda name: f"/usr/bin/{name}" if name in managers else None,
        os_release=release,
    )
    return context, runner


def build(context):
    return ProbeRegistry(context=context).build()


def test_full_snapshot(tmp_path):
    context, _ = make_context(
        tmp_path,
        env={
            "SHELL": "/usr/bin/zsh",
            "XDG_CURRENT_DESKTOP": "GNOME",
            "TERM": "xterm-256color",
        },
        outputs={
            "pacman -Qq": "bash\ncoreutils\nlinux\n",
            "gsettings get org.gnome.desktop.interface gtk-theme": "'Adwaita-dark'\n",
            "gsettings get org.gnome.desktop.interface icon-theme": "'Papirus'\n",
        },
        managers=("pacman",),
    )

    assert build(context) == SystemSnapshot(
        name="Arch Linux",
        architecture="x86_64",
        kernel="6.9.1-arch1-1",
        shell="zsh",
        desktop="GNOME",
        packages="3 (pacman)",
        uptime="up 2 hours, 5 minutes",
        wm="GNOME",
        theme="Adwaita-dark",
        icons="Papirus",
        terminal="xterm-256color",
    )


def test_every_field_falls_back_to_unknown(tmp_path):
    context, _ = make_context(
        tmp_path,
        os_release="ID=arch\n",
        outputs={"uname -m": "\n", "uname -r": "", "uptime -p": "  \n"},
    )

    snapshot = build(context)

    assert all(value == UNKNOWN for value in vars(snapshot).values())


def test_snapshot_is_immutable(tmp_path):
    context, _ = make_context(tmp_path)
    snapshot = build(context)
    with pytest.raises(AttributeError):
        snapshot.kernel = "other"


def test_shell_is_last_path_segment(tmp_path):
    context, _ = make_context(tmp_path, env={"SHELL": "/usr/bin/zsh"})
    assert build(context).shell == "zsh"


def test_shell_without_segment_is_unknown(tmp_path):
    context, _ = make_context(tmp_path, env={"SHELL": "/bin/"})
    assert build(context).shell == UNKNOWN


def test_desktop_falls_back_to_session(tmp_path):
    context, _ = make_context(tmp_path, env={"DESKTOP_SESSION": "gnome-classic"})
    snapshot = build(context)
    assert snapshot.desktop == "gnome-classic"
    assert snapshot.wm == "gnome-classic"


def test_empty_desktop_variable_counts_as_unset(tmp_path):
    context, _ = make_context(tmp_path, env={"XDG_CURRENT_DESKTOP": "", "DESKTOP_SESSION": "plasma"})
    assert build(context).desktop == "plasma"


def test_desktop_unknown_without_variables(tmp_path):
    context, _ = make_context(tmp_path)
    assert build(context).desktop == UNKNOWN


def test_os_name_strips_quotes(tmp_path):
    context, _ = make_context(tmp_path, os_release='PRETTY_NAME="Ubuntu 24.04 LTS"\n')
    assert build(context).name == "Ubuntu 24.04 LTS"


def test_unreadable_release_file_aborts(tmp_path):
    context, _ = make_context(tmp_path, os_release=None)
    with pytest.raises(ProbeInvocationError):
        build(context)


def test_no_package_manager_is_unknown(tmp_path):
    context, runner = make_context(tmp_path)
    assert build(context).packages == UNKNOWN
    assert not any(call.startswith(("pacman", "apt", "dnf")) for call in runner.calls)


def test_first_package_manager_wins(tmp_path):
    context, runner = make_context(
        tmp_path,
        managers=("apt", "dnf"),
        outputs={
            "apt list --installed": "Listing...\nbash/noble 5.2\nzsh/noble 5.9\n",
            "dnf list installed": "bash\n",
        },
    )

    assert build(context).packages == "3 (apt)"
    assert "dnf list installed" not in runner.calls


def test_package_manager_without_output_is_unknown(tmp_path):
    context, _ = make_context(tmp_path, managers=("xbps-query",), outputs={"xbps-query -l": ""})
    assert build(context).packages == UNKNOWN


def test_package_manager_spawn_failure_aborts(tmp_path):
    context, _ = make_context(tmp_path, managers=("emerge",))
    with pytest.raises(ProbeInvocationError):
        build(context)


@pytest.mark.parametrize("command", ["uname -m", "uname -r", "uptime -p"])
def test_failed_system_utility_aborts(tmp_path, command):
    context, _ = make_context(tmp_path, outputs={command: CommandResult(error="exec format error")})
    with pytest.raises(ProbeInvocationError, match="exec format error"):
        build(context)


def test_theme_failure_does_not_abort(tmp_path):
    context, runner = make_context(tmp_path, env={"TERM": "xterm"})

    snapshot = build(context)

    assert snapshot.theme == UNKNOWN
    assert snapshot.icons == UNKNOWN
    assert snapshot.terminal == "xterm"
    assert "gsettings get org.gnome.desktop.interface gtk-theme" in runner.calls


@pytest.mark.parametrize("output", ["''\n", "'Unknown'\n", ""])
def test_theme_placeholder_is_unknown(tmp_path, output):
    context, _ = make_context(
        tmp_path, outputs={"gsettings get org.gnome.desktop.interface gtk-theme": output}
    )
    assert build(context).theme == UNKNOWN


def test_registry_tries_strategies_in_order(tmp_path):
    context, _ = make_context(tmp_path)
    attempts = []

    def missing(_):
        attempts.append("missing")
        raise ProbeValueMissing("nothing")

    def broken(_):
        attempts.append("broken")
        raise ProbeInvocationError("boom")

    def found(_):
        attempts.append("found")
        return "value"

    def never(_):
        attempts.append("never")
        return "other"

    registry = ProbeRegistry(probes=(), context=context)

    assert registry.probe(ProbeSpec("field", (missing, broken, found, never))) == "value"
    assert attempts == ["missing", "broken", "found"]


def test_registry_fail_fast_flag_controls_abort(tmp_path):
    context, _ = make_context(tmp_path)

    def broken(_):
        raise ProbeInvocationError("boom")

    registry = ProbeRegistry(probes=(), context=context)

    assert registry.probe(ProbeSpec("field", (broken,))) == UNKNOWN
    with pytest.raises(ProbeInvocationError):
        registry.probe(ProbeSpec("field", (broken,), fail_fast=True))


def test_run_command_reports_spawn_failure(monkeypatch):
    def fake_run(*args, **kwargs):
        raise FileNotFoundError(2, "No such file or directory")

    monkeypatch.setattr(probes.subprocess, "run", fake_run)

    result = run_command("gsettings", ["get"])

    assert not result.ok
    assert "gsettings" in result.error


def test_run_command_rejects_non_utf8_output(monkeypatch):
    def fake_run(command, **kwargs):
        return subprocess.CompletedProcess(command, 0, stdout=b"\xff\xfe", stderr=b"")

    monkeypatch.setattr(probes.subprocess, "run", fake_run)

    result = run_command("uname", ["-m"])

    assert not result.ok
    assert "UTF-8" in result.error


def test_run_command_captures_stdout(monkeypatch):
    def fake_run(command, **kwargs):
        assert command == ["uname", "-r"]
        assert kwargs["capture_output"] is True
        return subprocess.CompletedProcess(command, 1, stdout=b"6.9.1\n", stderr=b"warning")

    monkeypatch.setattr(probes.subprocess, "run", fake_run)

    assert run_command("uname", ["-r"]) == CommandResult(stdout="6.9.1\n")


def test_package_lines_split_on_newlines_only(tmp_path):
    context, _ = make_context(
        tmp_path,
        managers=("pacman",),
        outputs={"pacman -Qq": "bash\nform\x0cfeed\nvertical\x0btab\nzsh"},
    )
    assert build(context).packages == "4 (pacman)"
