from __future__ import annotations

import io
import json
import sys
import warnings
from collections.abc import Mapping
from contextlib import redirect_stderr, redirect_stdout
from typing import Any

from dyseq.utils.errors import LibraryError


def _fail(*, code: int, error_type: str, message: str) -> int:
    payload = {
        "ok": False,
        "error": {
            "type": error_type,
            "message": message,
        },
    }
    print(json.dumps(payload), file=sys.stdout)
    return code


def _read_payload() -> Mapping[str, Any]:
    raw = sys.stdin.read().strip()
    if not raw:
        raise ValueError("Missing JSON input payload on stdin.")
    payload = json.loads(raw)
    if not isinstance(payload, dict):
        raise ValueError("JSON payload must be an object.")
    return payload


def _is_ping_request(argv: list[str]) -> bool:
    if len(argv) <= 1:
        return False
    return argv[1].strip().lower() in {"--ping", "ping", "--health"}


def _emit_ping() -> int:
    payload = {
        "ok": True,
        "result": {
            "bridge": "dyseq-bridge",
            "status": "ok",
        },
    }
    print(json.dumps(payload), file=sys.stdout)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Run one bridge operation read from stdin and print a JSON result.

    The payload is `{"operation": str, "params": object}`. Library warnings
    raised during the run are returned under `warnings` rather than printed.
    """

    argv = list(sys.argv if argv is None else argv)
    if _is_ping_request(argv):
        return _emit_ping()

    try:
        payload = _read_payload()
    except json.JSONDecodeError as exc:
        return _fail(code=2, error_type="json_decode_error", message=str(exc))
    except ValueError as exc:
        return _fail(code=2, error_type="payload_error", message=str(exc))

    operation = payload.get("operation")
    params = payload.get("params", {})
    if not isinstance(operation, str) or not operation.strip():
        return _fail(
            code=2,
            error_type="payload_error",
            message="`operation` must be a non-empty string.",
        )
    if not isinstance(params, dict):
        return _fail(
            code=2,
            error_type="payload_error",
            message="`params` must be an object.",
        )

    try:
        from dyseq.bridge.operations import execute_operation
    except ImportError as exc:
        return _fail(
            code=3,
            error_type="library_error",
            message=f"Failed to import bridge operations: {exc}",
        )

    try:
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            with redirect_stdout(io.StringIO()), redirect_stderr(io.StringIO()):
                result = execute_operation(operation.strip(), params)
    except LibraryError as exc:
        return _fail(code=3, error_type="library_error", message=str(exc))
    except Exception as exc:  # pragma: no cover - last-resort JSON error
        return _fail(code=1, error_type="internal_error", message=str(exc))

    response: dict[str, Any] = {"ok": True, "result": result}
    if caught:
        response["warnings"] = [
            {"type": item.category.__name__, "message": str(item.message)}
            for item in caught
        ]
    print(json.dumps(response, ensure_ascii=False, default=str))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
