from __future__ import annotations

import io
import json
from pathlib import Path

import pandas as pd
import pytest

from dyseq.bridge.operations import build_registry, execute_operation
from dyseq.bridge.runner import main
from dyseq.utils.errors import OperationNotFoundError


def _run_bridge(monkeypatch, capsys, payload: object) -> tuple[int, dict]:
    monkeypatch.setattr("sys.stdin", io.StringIO(json.dumps(payload)))
    code = main(["dyseq-bridge"])
    output = capsys.readouterr().out.strip().splitlines()[-1]
    return code, json.loads(output)


def test_ping(capsys) -> None:
    assert main(["dyseq-bridge", "--ping"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload == {"ok": True, "result": {"bridge": "dyseq-bridge", "status": "ok"}}


def test_registry_lists_operations() -> None:
    names = build_registry().names()

    assert "sequence_analysis.grid_sequences.catalog" in names
    assert "sequence_analysis.grid_sequences.run" in names
    listed = execute_operation("operations.list", {})
    assert {entry["name"] for entry in listed["operations"]} == set(names)


def test_unknown_operation_raises() -> None:
    with pytest.raises(OperationNotFoundError):
        execute_operation("sequence_analysis.nothing", {})


def test_run_through_stdin(
    monkeypatch, capsys, tmp_path: Path, dyad_frame: pd.DataFrame
) -> None:
    input_path = tmp_path / "dyads.csv"
    dyad_frame.to_csv(input_path, index=False)
    payload = {
        "operation": "sequence_analysis.grid_sequences.run",
        "params": {
            "technique": "grid_costs",
            "params": {
                "input_path": str(input_path),
                "output_path": str(tmp_path / "clusters.csv"),
                "id_col": "dyad",
                "time_col": "day",
                "value_cols": ["partner_a", "partner_b"],
                "n_clusters": 2,
                "indel_cost": 1.0,
            },
        },
    }

    code, response = _run_bridge(monkeypatch, capsys, payload)

    assert code == 0
    assert response["ok"] is True
    assert response["result"]["n_clusters"] == 2
    assert (tmp_path / "clusters.csv").exists()
    warning_types = {item["type"] for item in response["warnings"]}
    assert "DegenerateSubstitutionCost" in warning_types


def test_unknown_operation_exit_code(monkeypatch, capsys) -> None:
    code, response = _run_bridge(
        monkeypatch, capsys, {"operation": "nope", "params": {}}
    )

    assert code == 3
    assert response["ok"] is False
    assert response["error"]["type"] == "library_error"


def test_payload_must_be_an_object(monkeypatch, capsys) -> None:
    code, response = _run_bridge(monkeypatch, capsys, ["not", "an", "object"])

    assert code == 2
    assert response["error"]["type"] == "payload_error"


def test_missing_technique(monkeypatch, capsys) -> None:
    code, response = _run_bridge(
        monkeypatch,
        capsys,
        {"operation": "sequence_analysis.grid_sequences.run", "params": {"params": {}}},
    )

    assert code == 3
    assert "technique" in response["error"]["message"]


def test_unknown_operation_lists_its_siblings() -> None:
    with pytest.raises(OperationNotFoundError, match="grid_sequences.catalog"):
        execute_operation("sequence_analysis.grid_sequences.plot", {})


def test_registry_groups_operations_by_namespace() -> None:
    registry = build_registry()

    assert registry.names(namespace="sequence_analysis.grid_sequences") == [
        "sequence_analysis.grid_sequences.catalog",
        "sequence_analysis.grid_sequences.run",
    ]
    listed = {row["name"]: row["namespace"] for row in registry.describe()}
    assert listed["operations.list"] == "operations"
