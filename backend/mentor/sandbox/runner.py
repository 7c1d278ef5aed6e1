"""
Child-side script runner for the sandbox.

Executed as ``python -I runner.py`` in a fresh process per request. Reads the
script from stdin, runs it as the body of a function with a reduced builtins
table, and writes exactly one JSON line to stdout::

    {"status": "ok", "value": "<rendered value>"}
    {"status": "error", "kind": "RuntimeError", "message": "..."}

Only the standard library is used here: the child starts isolated and must
not depend on the parent's environment.
"""

import ast
import io
import json
import sys

MAX_RENDERED_CHARS = 100_000
MEMORY_LIMIT_BYTES = 256 * 1024 * 1024
CPU_LIMIT_SECONDS = 5

SAFE_BUILTIN_NAMES = (
    "abs", "all", "any", "bin", "bool", "bytes", "callable", "chr", "complex",
    "dict", "divmod", "enumerate", "filter", "float", "format", "frozenset",
    "hash", "hex", "int", "isinstance", "issubclass", "iter", "len", "list",
    "map", "max", "min", "next", "oct", "ord", "pow", "print", "range", "repr",
    "reversed", "round", "set", "slice", "sorted", "str", "sum", "tuple", "zip",
    "ArithmeticError", "AssertionError", "AttributeError", "Exception",
    "IndexError", "KeyError", "LookupError", "NameError", "NotImplementedError",
    "OverflowError", "RecursionError", "RuntimeError", "StopIteration",
    "TypeError", "ValueError", "ZeroDivisionError",
    "__build_class__",
)

ENTRY_POINT = "_sandbox_main"
RESULT_NAME = "_sandbox_result"

# Frame, generator, coroutine, traceback and code object internals lead back to
# the runner's own globals and the real builtins.
INTROSPECTION_PREFIXES = ("f_", "gi_", "cr_", "ag_", "tb_", "co_")


class RestrictedOperation(Exception):
    """Script uses a construct that is not available in the sandbox."""


def safe_builtins() -> dict:
    import builtins

    return {name: getattr(builtins, name) for name in SAFE_BUILTIN_NAMES}


def apply_resource_limits() -> None:
    """Cap address space and CPU time where the platform supports it."""
    if sys.platform == "win32":
        return
    import resource

    for limit, value in (
        (resource.RLIMIT_AS, MEMORY_LIMIT_BYTES),
        (resource.RLIMIT_CPU, CPU_LIMIT_SECONDS),
        (resource.RLIMIT_FSIZE, 0),
        # stdin, stdout and stderr stay usable; no new files or sockets
        (resource.RLIMIT_NOFILE, 3),
    ):
        soft, hard = resource.getrlimit(limit)
        if hard != resource.RLIM_INFINITY:
            value = min(value, hard)
        try:
            resource.setrlimit(limit, (value, hard))
        except (ValueError, OSError):
            # Some containers refuse lowering particular limits
            pass


def check_restricted(tree: ast.AST) -> None:
    """Reject the usual ways out of reduced builtins.

    Dunder names and attributes, introspection attributes of frames,
    generators, coroutines, tracebacks and code objects, and imports.
    """
    for node in ast.walk(tree):
        if isinstance(node, ast.Attribute) and (
            node.attr.startswith("__") or node.attr.startswith(INTROSPECTION_PREFIXES)
        ):
            raise RestrictedOperation(f"Access to attribute '{node.attr}' is not allowed")
        if isinstance(node, ast.Name) and node.id.startswith("__"):
            raise RestrictedOperation(f"Access to name '{node.id}' is not allowed")
        if isinstance(node, (ast.Import, ast.ImportFrom)):
            raise RestrictedOperation("Module imports are not allowed")


def build_program(source: str):
    """Compile ``source`` as the body of a function returning its final value.

    An explicit ``return`` works as in any function; a trailing bare
    expression is turned into the return value.
    """
    tree = ast.parse(source, filename="<sandbox>", mode="exec")
    check_restricted(tree)

    body = tree.body or [ast.Pass()]
    last = body[-1]
    if isinstance(last, ast.Expr):
        body[-1] = ast.copy_location(ast.Return(value=last.value), last)

    wrapper = ast.parse(f"def {ENTRY_POINT}():\n    pass\n", filename="<sandbox>")
    wrapper.body[0].body = body
    ast.fix_missing_locations(wrapper)
    return compile(wrapper, "<sandbox>", "exec")


# The entry point is called from code running in the sandbox namespace, so the
# frame directly above the script never holds the runner's globals.
_TRAMPOLINE = compile(f"{RESULT_NAME} = {ENTRY_POINT}()", "<sandbox>", "exec")


def _json_default(value):
    if isinstance(value, (set, frozenset)):
        try:
            return sorted(value)
        except TypeError:
            return list(value)
    return repr(value)


def render_value(value) -> str:
    """Structured values become indented JSON text, scalars their ``str()``."""
    if isinstance(value, (dict, list, tuple, set, frozenset)):
        try:
            text = json.dumps(value, indent=2, default=_json_default)
        except (TypeError, ValueError):
            text = repr(value)
    else:
        text = str(value)
    if len(text) > MAX_RENDERED_CHARS:
        text = text[:MAX_RENDERED_CHARS] + "\n... (truncated)"
    return text


def run(source: str) -> dict:
    try:
        program = build_program(source)
    except RestrictedOperation as e:
        return {"status": "error", "kind": "RestrictedOperation", "message": str(e)}
    except SyntaxError as e:
        return {"status": "error", "kind": "RuntimeError", "message": f"SyntaxError: {e.msg} (line {e.lineno})"}

    namespace = {"__builtins__": safe_builtins(), "__name__": "__sandbox__"}
    captured = io.StringIO()
    real_stdout = sys.stdout
    sys.stdout = captured
    try:
        exec(program, namespace)
        exec(_TRAMPOLINE, namespace)
        value = namespace.pop(RESULT_NAME, None)
        return {"status": "ok", "value": render_value(value), "stdout": captured.getvalue()[:MAX_RENDERED_CHARS]}
    except Exception as e:
        return {"status": "error", "kind": "RuntimeError", "message": f"{type(e).__name__}: {e}"}
    finally:
        sys.stdout = real_stdout


def main() -> int:
    source = sys.stdin.read()
    apply_resource_limits()
    result = run(source)
    sys.stdout.write(json.dumps(result) + "\n")
    sys.stdout.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())
