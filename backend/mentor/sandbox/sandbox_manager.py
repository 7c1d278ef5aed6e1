"""
Sandboxed execution engine for short untrusted scripts.

Policy, evaluated in order:

1. Static denylist. The source text is searched case-insensitively for
   ``process``, ``require`` and ``import``; any hit is rejected as a
   restricted operation before anything runs. This is a coarse pre-filter
   that both over-blocks (``reimport``) and can be bypassed; it is not a
   security boundary.
2. Bounded execution. Each request gets its own child interpreter started
   with ``-I`` and an empty environment inside a throwaway working
   directory. The child removes its capabilities before running the script
   (reduced builtins, no imports, no dunder or frame introspection
   access, rlimits including a file descriptor cap) and is killed
   when the wall-clock timeout expires. The separate process is the
   containment; nothing is shared between requests.
3. Result shaping. The child renders the final value; runtime errors come
   back classified with their message.
"""

import asyncio
import json
import logging
import re
import sys
import tempfile
import time
from pathlib import Path
from typing import Optional

from mentor.models.domain import ErrorKind, ExecutionOutcome, ExecutionRequest

logger = logging.getLogger(__name__)

EXECUTION_TIMEOUT_SECONDS = 2.0
MAX_SOURCE_CHARS = 10_000
DENYLIST_PATTERN = re.compile(r"(process|require|import)", re.IGNORECASE)
RUNNER_PATH = Path(__file__).resolve().parent / "runner.py"

_CHILD_KINDS = {
    "RestrictedOperation": ErrorKind.RESTRICTED_OPERATION,
    "RuntimeError": ErrorKind.RUNTIME_ERROR,
}


def check_denylist(source: str) -> Optional[str]:
    """Return the first denylisted token found in ``source``, if any."""
    match = DENYLIST_PATTERN.search(source)
    return match.group(1) if match else None


class SandboxExecutor:
    """Runs one script per call in an isolated child interpreter."""

    def __init__(
        self,
        timeout: float = EXECUTION_TIMEOUT_SECONDS,
        python_executable: Optional[str] = None,
        runner_path: Path = RUNNER_PATH,
    ):
        self.timeout = timeout
        self.python_executable = python_executable or sys.executable
        self.runner_path = runner_path

    def precheck(self, request: ExecutionRequest) -> Optional[ExecutionOutcome]:
        """Static checks applied before any process is started."""
        if len(request.source) > MAX_SOURCE_CHARS:
            return ExecutionOutcome.failure(
                ErrorKind.RESTRICTED_OPERATION,
                f"Script exceeds {MAX_SOURCE_CHARS} characters",
            )
        token = check_denylist(request.source)
        if token is not None:
            logger.warning(f"Execution rejected, denylisted token '{token}'")
            return ExecutionOutcome.failure(
                ErrorKind.RESTRICTED_OPERATION, "Restricted keywords detected"
            )
        return None

    async def execute(self, request: ExecutionRequest) -> ExecutionOutcome:
        """Run ``request.source`` and classify the result. Never raises."""
        rejected = self.precheck(request)
        if rejected is not None:
            return rejected

        started = time.perf_counter()
        try:
            outcome = await self._run_child(request.source)
        except Exception as e:
            logger.error(f"Sandbox failure: {e}", exc_info=True)
            outcome = ExecutionOutcome.failure(ErrorKind.UNEXPECTED_INTERNAL_ERROR, str(e) or type(e).__name__)

        elapsed_ms = int((time.perf_counter() - started) * 1000)
        logger.info(
            f"Execution finished in {elapsed_ms}ms: "
            f"{'ok' if outcome.ok else outcome.error_kind.value}"
        )
        return outcome

    async def _run_child(self, source: str) -> ExecutionOutcome:
        with tempfile.TemporaryDirectory(prefix="mentor_sandbox_") as work_dir:
            proc = await asyncio.create_subprocess_exec(
                self.python_executable,
                "-I",
                str(self.runner_path),
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=work_dir,
                env={},
            )
            try:
                stdout, stderr = await asyncio.wait_for(
                    proc.communicate(source.encode("utf-8")), timeout=self.timeout
                )
            except asyncio.TimeoutError:
                await self._kill(proc)
                return ExecutionOutcome.failure(
                    ErrorKind.TIMEOUT,
                    f"Script execution timed out after {int(self.timeout * 1000)}ms",
                )
            except asyncio.CancelledError:
                await self._kill(proc)
                raise

        return self._parse_child_output(proc.returncode, stdout, stderr)

    @staticmethod
    async def _kill(proc: asyncio.subprocess.Process) -> None:
        if proc.returncode is None:
            try:
                proc.kill()
            except ProcessLookupError:
                pass
        await proc.wait()

    @staticmethod
    def _parse_child_output(returncode: Optional[int], stdout: bytes, stderr: bytes) -> ExecutionOutcome:
        lines = stdout.decode("utf-8", errors="replace").strip().splitlines()
        if not lines:
            detail = stderr.decode("utf-8", errors="replace").strip()[-500:]
            logger.error(f"Sandbox process exited with code {returncode} and no result: {detail}")
            return ExecutionOutcome.failure(
                ErrorKind.UNEXPECTED_INTERNAL_ERROR,
                f"Sandbox process exited with code {returncode}",
            )
        try:
            result = json.loads(lines[-1])
        except json.JSONDecodeError:
            logger.error(f"Failed to parse sandbox output: {lines[-1][:200]}")
            return ExecutionOutcome.failure(
                ErrorKind.UNEXPECTED_INTERNAL_ERROR, "Failed to parse execution output"
            )

        if result.get("status") == "ok":
            return ExecutionOutcome.success(str(result.get("value", "")))
        kind = _CHILD_KINDS.get(result.get("kind"), ErrorKind.UNEXPECTED_INTERNAL_ERROR)
        return ExecutionOutcome.failure(kind, str(result.get("message", "")))
