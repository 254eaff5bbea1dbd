"""JavaScript execution in a separate, resource-limited Node.js process.

The code never runs inside the agent process. Each call gets a fresh
``node`` child with a scrubbed environment, a throwaway working directory,
a CPU-time and heap cap, string code generation disabled and a wall-clock
timeout. Inside the child the code runs in a ``vm`` context that only
exposes a capturing ``console`` and ``demoFunctions``.
"""

import json
import logging
import os
import shutil
import subprocess
import tempfile

# For per-process CPU/file limits (prlimit is Linux only)
try:
    import resource
    HAS_PRLIMIT = hasattr(resource, "prlimit")
except ImportError:
    HAS_PRLIMIT = False

logger = logging.getLogger("agentflow.skills.javascript")

_PRELUDE = r"""
var demoFunctions = {
  fibonacci: function (n) {
    if (n <= 1) return n;
    return demoFunctions.fibonacci(n - 1) + demoFunctions.fibonacci(n - 2);
  },
  isPrime: function (num) {
    if (num < 2) return false;
    for (var i = 2; i <= Math.sqrt(num); i++) {
      if (num % i === 0) return false;
    }
    return true;
  },
  generateRandomData: function (count) {
    return Array.from({ length: count }, function () { return Math.floor(Math.random() * 100); });
  }
};
"""

HARNESS = r"""
const vm = require('vm');
const timeout = parseInt(process.env.SANDBOX_TIMEOUT_MS || '5000', 10);
const prelude = process.env.SANDBOX_PRELUDE || '';
let code = '';
process.stdin.setEncoding('utf8');
process.stdin.on('data', (chunk) => { code += chunk; });
process.stdin.on('end', () => {
  const logs = [];
  const fmt = (a) => (typeof a === 'object' && a !== null) ? JSON.stringify(a) : String(a);
  const log = (...args) => { logs.push(args.map(fmt).join(' ')); };
  const ctx = vm.createContext(
    { console: { log: log, info: log, warn: log, error: log } },
    { codeGeneration: { strings: false, wasm: false } }
  );
  let out;
  try {
    vm.runInContext(prelude, ctx);
    const result = vm.runInContext(code, ctx, { timeout: timeout });
    let value = null;
    if (result !== undefined) {
      try { value = JSON.parse(JSON.stringify(result)); } catch (e) { value = String(result); }
      if (value === undefined) value = String(result);
    }
    out = { result: value, logs: logs, success: true };
  } catch (e) {
    out = { error: (e && e.message) ? e.message : String(e), logs: logs, success: false };
  }
  process.stdout.write(JSON.stringify(out));
});
"""


def _limit_resources(pid: int, cpu_seconds: int, max_file_bytes: int = 1 << 20):
    """Cap CPU time and file writes of an already started child.

    Applied from the parent with prlimit, so no code runs in the forked
    child before exec.
    """
    if not HAS_PRLIMIT:
        return
    limits = (
        (resource.RLIMIT_CPU, (cpu_seconds, cpu_seconds)),
        (resource.RLIMIT_FSIZE, (max_file_bytes, max_file_bytes)),
        (resource.RLIMIT_CORE, (0, 0)),
    )
    for which, limit in limits:
        try:
            resource.prlimit(pid, which, limit)
        except ProcessLookupError:
            # Child already exited
            return


def execute_javascript(code: str, timeout: float = 5.0, memory_mb: int = 64,
                       node_path: str = "node", enabled: bool = True) -> dict:
    """
    Execute JavaScript code in a sandboxed Node.js process and return the result.

    Args:
        code: The JavaScript code to execute

    Returns:
        Dict with code, result, logs and success, or success=False with an error
    """
    if not enabled:
        return {"code": code, "success": False, "error": "JavaScript execution is disabled"}
    if not isinstance(code, str):
        return {"code": code, "success": False, "error": "code must be a string"}

    node = shutil.which(node_path)
    if not node:
        return {"code": code, "success": False, "error": f"Node.js runtime not found ({node_path})"}

    cmd = [
        node,
        f"--max-old-space-size={memory_mb}",
        "--disallow-code-generation-from-strings",
        "-e", HARNESS,
    ]
    env = {
        "PATH": os.path.dirname(node),
        "SANDBOX_TIMEOUT_MS": str(int(timeout * 1000)),
        "SANDBOX_PRELUDE": _PRELUDE,
    }

    with tempfile.TemporaryDirectory(prefix="agentflow-js-") as workdir:
        try:
            proc = subprocess.Popen(
                cmd,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                cwd=workdir,
                env=env,
            )
        except OSError as e:
            return {"code": code, "success": False, "error": f"Could not start Node.js: {e}"}

        _limit_resources(proc.pid, int(timeout) + 1)
        try:
            stdout, stderr = proc.communicate(input=code, timeout=timeout + 2)
        except subprocess.TimeoutExpired:
            proc.kill()
            proc.communicate()
            return {"code": code, "success": False, "error": f"Execution timed out after {timeout}s"}

    try:
        payload = json.loads(stdout)
    except json.JSONDecodeError:
        lines = (stderr or "").strip().splitlines()
        reason = lines[-1] if lines else f"exit code {proc.returncode}"
        logger.debug(f"Sandbox produced no result: {stderr}")
        return {"code": code, "success": False, "error": f"Sandbox failed: {reason}"}

    if payload.get("success"):
        return {
            "code": code,
            "result": payload.get("result"),
            "logs": payload.get("logs", []),
            "success": True,
        }
    return {
        "code": code,
        "error": payload.get("error", "Unknown error"),
        "logs": payload.get("logs", []),
        "success": False,
    }
