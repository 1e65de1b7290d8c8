from __future__ import annotations

import shlex
import sys
import textwrap
from pathlib import Path
from typing import Callable, Tuple

import pytest

from corpusrun import bootstrap

# Stand-in for the program under test. The first word of the input file picks
# the behaviour; the rest of the file is its argument.
PROGRAM = textwrap.dedent(
    """
    import os
    import pathlib
    import subprocess
    import sys
    import time

    if len(sys.argv) != 3 or sys.argv[2] != "--headless":
        print("usage: program <input> --headless", file=sys.stderr)
        sys.exit(64)
    words = pathlib.Path(sys.argv[1]).read_text(encoding="utf-8").split(maxsplit=1)
    mode = words[0] if words else ""
    arg = words[1].strip() if len(words) > 1 else ""

    if mode == "pass":
        print("ROM carregada", flush=True)
        print("Teste passou", flush=True)
        sys.exit(0)
    elif mode == "fail":
        print("Teste falhou com codigo 1", flush=True)
        sys.exit(1)
    elif mode == "self-timeout":
        print("Teste deu timeout", flush=True)
        sys.exit(2)
    elif mode == "exit":
        sys.exit(int(arg))
    elif mode == "say":
        print(arg, flush=True)
        sys.exit(3)
    elif mode == "env":
        print(os.environ.get(arg, ""), flush=True)
        print(os.getcwd(), flush=True)
        sys.exit(0)
    elif mode == "hang":
        if arg:
            pathlib.Path(arg).write_text(str(os.getpid()), encoding="utf-8")
        time.sleep(60)
    elif mode == "spawn":
        code = (
            "import pathlib, time; time.sleep(1.5); "
            f"pathlib.Path({arg!r}).write_text('late', encoding='utf-8')"
        )
        subprocess.Popen([sys.executable, "-c", code])
        time.sleep(60)
    elif mode == "detach":
        code = (
            "import pathlib, time; time.sleep(1.5); "
            f"pathlib.Path({arg!r}).write_text('late', encoding='utf-8')"
        )
        subprocess.Popen([sys.executable, "-c", code])
        print("Teste passou", flush=True)
        sys.exit(0)
    sys.exit(5)
    """
)


@pytest.fixture(scope="session", autouse=True)
def setup_corpusrun() -> None:
    """Load configured plugins once for the entire test session."""

    bootstrap()


@pytest.fixture
def program(tmp_path: Path) -> Tuple[str, ...]:
    script = tmp_path / "program_under_test.py"
    script.write_text(PROGRAM, encoding="utf-8")
    return (sys.executable, str(script))


@pytest.fixture
def program_command(program: Tuple[str, ...]) -> str:
    return " ".join(shlex.quote(part) for part in program)


@pytest.fixture
def write_input(tmp_path: Path) -> Callable[..., Path]:
    corpus_dir = tmp_path / "roms"

    def _write(name: str, content: str, *, subdir: str = "") -> Path:
        path = corpus_dir / subdir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write
