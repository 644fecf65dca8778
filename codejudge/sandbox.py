"""
Isolated JavaScript execution for submitted code.

Every execution unit runs in a fresh Node.js process, inside a new vm
context that has no require(), process, module system or host globals
and cannot generate code from strings. The vm timeout stops runaway
scripts; a wall-clock fallback kills the whole process tree if the
interpreter itself stops responding.
Unix: RLIMIT_CPU bounds CPU time, V8's old-space cap bounds the heap.
Windows: wall-clock timeout and heap cap only.
"""

import os
import json
import math
import signal
import shutil
import platform
import subprocess
import tempfile
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import psutil

from .exceptions import SandboxExecutionError, SandboxUnavailableError
from .models import DEFAULT_TIME_LIMIT_MS, DEFAULT_MEMORY_LIMIT_MB, Question

logger = logging.getLogger(__name__)

# Node needs a moment to boot before the vm timeout starts counting.
STARTUP_GRACE_SEC = 1.0

NO_ENTRY_POINT_MESSAGE = "No solution or main function defined"

HARNESS_JS = r"""
'use strict';
const vm = require('vm');

const mode = process.argv[2];
const timeout = Number(process.argv[3]);

function describe(err) {
  if (err !== null && typeof err === 'object' && typeof err.message === 'string') {
    return err.message;
  }
  return 'Uncaught ' + String(err);
}

function classify(err) {
  if (err !== null && typeof err === 'object') {
    if (err.code === 'ERR_SCRIPT_EXECUTION_TIMEOUT') {
      return 'timeout';
    }
    if (err.name === 'SyntaxError') {
      return 'syntax_error';
    }
  }
  return 'runtime_error';
}

let source = '';
process.stdin.setEncoding('utf8');
process.stdin.on('data', (chunk) => { source += chunk; });
process.stdin.on('end', () => {
  let payload;
  try {
    const script = new vm.Script(source, { filename: 'submission.js' });
    if (mode === 'check') {
      payload = { ok: true, isNull: true, text: '' };
    } else {
      const context = vm.createContext(Object.create(null), {
        codeGeneration: { strings: false, wasm: false },
        microtaskMode: 'afterEvaluate',
      });
      vm.runInContext(
        'globalThis.console = { log() {}, info() {}, warn() {}, error() {}, debug() {} };',
        context
      );
      const outcome = script.runInContext(context, { timeout: timeout, displayErrors: false });
      payload = { ok: true, isNull: outcome.isNull === true, text: String(outcome.text) };
    }
  } catch (err) {
    payload = { ok: false, reason: classify(err), message: describe(err) };
  }
  process.stdout.write(JSON.stringify(payload));
});
"""


@dataclass
class SandboxOutput:
    """Stringified return value of an execution unit."""
    text: str
    is_null: bool  # the entry point returned null or undefined


def build_execution_unit(code: str, test_input: str) -> str:
    """
    Build the JavaScript source for one test case.

    The submitted code is followed by a call to its entry point (solution,
    falling back to main) with the test input spliced in as a literal
    argument list, so "[2,7,11,15], 9" becomes two arguments. The result
    is stringified inside the sandbox: strings as-is, arrays and objects
    as JSON, other values through String().
    """
    return f"""{code}
;(function () {{
  var __entry = typeof solution === 'function' ? solution
    : (typeof main === 'function' ? main : undefined);
  if (__entry === undefined) {{
    throw new Error({json.dumps(NO_ENTRY_POINT_MESSAGE)});
  }}
  var __result = __entry(...[
{test_input}
  ]);
  if (__result === null || __result === undefined) {{
    return {{ isNull: true, text: String(__result) }};
  }}
  if (typeof __result === 'string') {{
    return {{ isNull: false, text: __result }};
  }}
  if (typeof __result === 'object') {{
    return {{ isNull: false, text: JSON.stringify(__result) }};
  }}
  return {{ isNull: false, text: String(__result) }};
}})();
"""


def get_node_executable(node_path: Optional[str] = None) -> str:
    """Resolve the Node.js executable, preferring an explicit path."""
    if node_path:
        resolved = shutil.which(node_path)
    else:
        resolved = shutil.which('node') or shutil.which('nodejs')

    if not resolved:
        raise SandboxUnavailableError()
    return resolved


def _sandbox_env() -> dict:
    """Environment for the interpreter process: nothing from the host."""
    if platform.system() == "Windows":
        # Windows processes cannot start without SYSTEMROOT.
        return {"SYSTEMROOT": os.environ.get("SYSTEMROOT", r"C:\Windows")}
    return {}


def _kill_process_tree(pid: int) -> None:
    """Kill a process and everything it spawned."""
    try:
        parent = psutil.Process(pid)
    except psutil.NoSuchProcess:
        return

    for child in parent.children(recursive=True):
        try:
            child.kill()
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue
    try:
        parent.kill()
    except psutil.NoSuchProcess:
        pass


def _is_heap_exhausted(stderr: str) -> bool:
    lowered = stderr.lower()
    return 'heap out of memory' in lowered or 'reached heap limit' in lowered


class Sandbox:
    """A single-use isolated execution context with fixed resource limits."""

    def __init__(self, node_executable: str, time_limit_ms: int, memory_limit_mb: int):
        self.node_executable = node_executable
        self.time_limit_ms = time_limit_ms
        self.memory_limit_mb = memory_limit_mb

    @property
    def timeout_message(self) -> str:
        return f"Script execution timed out after {self.time_limit_ms}ms"

    def run(self, source: str) -> SandboxOutput:
        """
        Execute a unit built by build_execution_unit.

        Returns:
            SandboxOutput with the stringified result

        Raises:
            SandboxExecutionError: reason is "syntax_error", "runtime_error",
                "timeout" or "memory_error"
        """
        payload = self._invoke("run", source)
        return SandboxOutput(text=str(payload.get("text", "")), is_null=bool(payload.get("isNull")))

    def check_syntax(self, code: str) -> Optional[str]:
        """
        Compile code without running it.

        Returns:
            The syntax error message, or None when the code parses
        """
        try:
            self._invoke("check", code)
        except SandboxExecutionError as e:
            if e.reason == "syntax_error":
                return e.message
            raise
        return None

    def _invoke(self, mode: str, source: str) -> dict:
        timeout_sec = self.time_limit_ms / 1000.0

        with tempfile.TemporaryDirectory() as temp_dir:
            harness_path = Path(temp_dir) / "__harness__.js"
            harness_path.write_text(HARNESS_JS, encoding='utf-8')

            command = [
                self.node_executable,
                f"--max-old-space-size={self.memory_limit_mb}",
                str(harness_path),
                mode,
                str(self.time_limit_ms),
            ]

            popen_kwargs = {}
            if platform.system() != "Windows":
                cpu_seconds = math.ceil(timeout_sec) + 1

                def set_limits():
                    import resource
                    # RLIMIT_AS is left alone: V8 reserves far more address
                    # space than it uses.
                    try:
                        resource.setrlimit(resource.RLIMIT_CPU, (cpu_seconds, cpu_seconds))
                    except (ValueError, OSError):
                        pass

                popen_kwargs["preexec_fn"] = set_limits

            try:
                proc = subprocess.Popen(
                    command,
                    stdin=subprocess.PIPE,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE,
                    cwd=temp_dir,
                    env=_sandbox_env(),
                    **popen_kwargs
                )
            except OSError as e:
                raise SandboxExecutionError("runtime_error", f"Execution error: {e}")

            try:
                stdout, stderr = proc.communicate(
                    source.encode('utf-8'),
                    timeout=timeout_sec * 2 + STARTUP_GRACE_SEC
                )
            except subprocess.TimeoutExpired:
                logger.warning("Sandbox process %s exceeded wall-clock limit, killing", proc.pid)
                _kill_process_tree(proc.pid)
                proc.communicate()
                raise SandboxExecutionError("timeout", self.timeout_message)

        stdout_text = stdout.decode('utf-8', errors='replace')
        stderr_text = stderr.decode('utf-8', errors='replace')

        if _is_heap_exhausted(stderr_text):
            raise SandboxExecutionError(
                "memory_error", f"Memory limit exceeded ({self.memory_limit_mb} MB)"
            )

        if platform.system() != "Windows" and proc.returncode in (-signal.SIGXCPU, -signal.SIGKILL):
            raise SandboxExecutionError("timeout", self.timeout_message)

        try:
            payload = json.loads(stdout_text)
        except json.JSONDecodeError:
            detail = stderr_text.strip()[:200] or f"exit code {proc.returncode}"
            raise SandboxExecutionError("runtime_error", f"Sandbox produced no result: {detail}")

        if not payload.get("ok"):
            raise SandboxExecutionError(
                payload.get("reason", "runtime_error"),
                payload.get("message", "Unknown error")
            )
        return payload


class SandboxFactory:
    """Creates a fresh Sandbox per execution unit with injected limits."""

    def __init__(
        self,
        node_path: Optional[str] = None,
        default_time_limit_ms: int = DEFAULT_TIME_LIMIT_MS,
        default_memory_limit_mb: int = DEFAULT_MEMORY_LIMIT_MB
    ):
        self.node_path = node_path
        self.default_time_limit_ms = default_time_limit_ms
        self.default_memory_limit_mb = default_memory_limit_mb
        self._node_executable: Optional[str] = None

    @property
    def node_executable(self) -> str:
        if self._node_executable is None:
            self._node_executable = get_node_executable(self.node_path)
            logger.info("Using Node.js interpreter at %s", self._node_executable)
        return self._node_executable

    def create(
        self,
        time_limit_ms: Optional[int] = None,
        memory_limit_mb: Optional[int] = None
    ) -> Sandbox:
        return Sandbox(
            self.node_executable,
            time_limit_ms or self.default_time_limit_ms,
            memory_limit_mb or self.default_memory_limit_mb,
        )

    def for_question(self, question: Question) -> Sandbox:
        """Create a sandbox bounded by the question's time and memory limits."""
        return self.create(question.time_limit_ms, question.memory_limit_mb)
