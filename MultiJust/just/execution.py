from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional


class ExecutionError(RuntimeError):
    pass


@dataclass(frozen=True)
class ExecutionResult:
    target: str
    command: List[str]
    exit_code: Optional[int]
    timed_out: bool
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return (not self.timed_out) and (self.exit_code == 0)


def _as_text(stream) -> str:
    # TimeoutExpired carries bytes even in text mode on some platforms.
    if isinstance(stream, bytes):
        return stream.decode("utf-8", errors="replace")
    return stream or ""


def run_command(
    target: str,
    command: List[str],
    *,
    cwd: Path,
    timeout_seconds: int,
    capture_output: bool = True,
) -> ExecutionResult:
    """Run one recipe. Output is inherited by the terminal unless captured."""
    try:
        proc = subprocess.run(
            command,
            cwd=str(cwd),
            capture_output=capture_output,
            text=True,
            timeout=max(1, int(timeout_seconds)),
            check=False,
        )
    except subprocess.TimeoutExpired as exc:
        return ExecutionResult(target, list(command), None, True, _as_text(exc.stdout), _as_text(exc.stderr))
    return ExecutionResult(target, list(command), proc.returncode, False, _as_text(proc.stdout), _as_text(proc.stderr))


@dataclass(frozen=True)
class BuildAction:
    """Runs one justfile target. The executable is looked up at run time."""

    target: str
    justfile: Optional[str] = None
    executable: str = "just"

    def command(self) -> List[str]:
        exe = shutil.which(self.executable)
        if not exe:
            raise ExecutionError(f"Build runner '{self.executable}' not found on PATH")

        cmd = [exe]
        if self.justfile:
            justfile = Path(self.justfile)
            cmd += ["--justfile", str(justfile), "--working-directory", str(justfile.parent)]
        cmd.append(self.target)
        return cmd

    def default_cwd(self) -> Path:
        if self.justfile:
            return Path(self.justfile).parent
        return Path.cwd()

    def run(
        self,
        *,
        cwd: Optional[str | Path] = None,
        timeout_seconds: int = 300,
        capture_output: bool = True,
    ) -> ExecutionResult:
        return run_command(
            self.target,
            self.command(),
            cwd=Path(cwd) if cwd is not None else self.default_cwd(),
            timeout_seconds=timeout_seconds,
            capture_output=capture_output,
        )


def build_command(target: str, *, justfile: Optional[str] = None, executable: str = "just") -> BuildAction:
    return BuildAction(target=target, justfile=justfile, executable=executable)
