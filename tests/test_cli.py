from __future__ import annotations

import json
import os
import signal
import subprocess
import sys
import time
from pathlib import Path

from click.testing import CliRunner

from corpusrun import __version__
from corpusrun.cli.main import cli, main

SRC_DIR = Path(__file__).resolve().parents[1] / "src"


def test_cli_help_short_flag() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["-h"])
    assert result.exit_code == 0
    assert "Usage:" in result.output
    assert "run" in result.output


def test_cli_version() -> None:
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_cli_run_clean_corpus(tmp_path: Path, program_command, write_input) -> None:
    write_input("cpu_instrs.gb", "pass")
    write_input("halt_bug.gb", "pass")
    result = CliRunner().invoke(
        cli,
        ["run", "--command", program_command, "--corpus", str(tmp_path / "roms"), "--no-color"],
    )
    assert result.exit_code == 0, result.output
    assert "total=2 passed=2" in result.output


def test_cli_run_with_failures_exits_nonzero(tmp_path: Path, program_command, write_input) -> None:
    write_input("cpu_instrs.gb", "pass")
    write_input("mem_timing.gb", "exit 7")
    report = tmp_path / "report.json"
    result = CliRunner().invoke(
        cli,
        [
            "run",
            "--command",
            program_command,
            "--corpus",
            str(tmp_path / "roms"),
            "--file",
            str(tmp_path / "roms" / "missing.gb"),
            "--report-path",
            str(report),
            "--no-color",
        ],
    )
    assert result.exit_code == 1, result.output
    payload = json.loads(report.read_text(encoding="utf-8"))
    assert payload["summary"]["unknown"] == 1
    assert payload["summary"]["missing_input"] == 1


def test_cli_plan_file(tmp_path: Path, program, write_input) -> None:
    write_input("slow.gb", "self-timeout")
    plan = tmp_path / "harness.yaml"
    plan.write_text(
        f"command: {json.dumps(list(program))}\n"
        "exit_codes: {2: timed_out}\n"
        "corpus: {root: roms}\n",
        encoding="utf-8",
    )
    result = CliRunner().invoke(cli, ["run", "--plan", str(plan), "--no-color"])
    assert result.exit_code == 1
    assert "TIMEOUT" in result.output


def test_cli_list_cases(tmp_path: Path, write_input) -> None:
    write_input("b.gb", "pass")
    write_input("a.gb", "pass")
    result = CliRunner().invoke(cli, ["run", "--corpus", str(tmp_path / "roms"), "--list"])
    assert result.exit_code == 0
    assert [line.split("\t")[0] for line in result.output.splitlines() if "\t" in line] == ["a", "b"]


def test_cli_launch_failure_is_fatal(tmp_path: Path, write_input) -> None:
    path = write_input("a.gb", "pass")
    result = CliRunner().invoke(
        cli, ["run", "--command", str(tmp_path / "no-emulator"), "--file", str(path)]
    )
    assert result.exit_code == 1
    assert "cannot launch" in result.output


def test_cli_bad_plan_is_reported(tmp_path: Path) -> None:
    plan = tmp_path / "harness.yaml"
    plan.write_text("timeout: fast\n", encoding="utf-8")
    result = CliRunner().invoke(cli, ["run", "--plan", str(plan)])
    assert result.exit_code == 1
    assert "Plan schema validation failed" in result.output


def test_main_returns_exit_code(tmp_path: Path, program_command, write_input) -> None:
    write_input("bad.gb", "fail")
    code = main(["run", "--command", program_command, "--corpus", str(tmp_path / "roms"), "--no-color"])
    assert code == 1


def test_sigterm_aborts_batch_and_kills_child(tmp_path: Path, program_command, write_input) -> None:
    started = tmp_path / "started.txt"
    write_input("a_hang.gb", f"hang {started}")
    write_input("b_pass.gb", "pass")
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(SRC_DIR), env.get("PYTHONPATH")]))
    harness = subprocess.Popen(
        [
            sys.executable,
            "-m",
            "corpusrun",
            "run",
            "--command",
            program_command,
            "--corpus",
            str(tmp_path / "roms"),
            "--timeout",
            "30",
            "--no-color",
        ],
        env=env,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
    )
    try:
        deadline = time.monotonic() + 20
        while not started.exists() and time.monotonic() < deadline:
            time.sleep(0.05)
        assert started.exists(), "program under test never started"
        time.sleep(0.2)
        harness.send_signal(signal.SIGTERM)
        output, _ = harness.communicate(timeout=20)
    finally:
        if harness.poll() is None:
            harness.kill()
            harness.wait()
    assert harness.returncode == 128 + signal.SIGTERM, output
    assert "Summary:" not in output
    assert "b_pass" not in output
    child_pid = int(started.read_text(encoding="utf-8"))
    try:
        os.kill(child_pid, 0)
    except ProcessLookupError:
        pass
    else:
        raise AssertionError(f"child {child_pid} survived the interrupt")
