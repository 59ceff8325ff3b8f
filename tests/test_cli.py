from __future__ import annotations

import json
import sys
from pathlib import Path

from typer.testing import CliRunner

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from vizrole.cli import app  # noqa: E402


runner = CliRunner()


def _bundle() -> dict:
    return {
        "roles": [
            {"id": "category", "levels": ["nominal", "ordinal"], "dataType": "string"},
            {"id": "measure", "levels": ["quantitative"], "dataType": "number"},
        ],
        "model": {
            "roles": [
                {"name": "rows", "type": "category", "isRequired": True},
                {"name": "measures", "type": "measure"},
            ]
        },
        "data": {
            "attributes": [
                {"name": "country", "type": "string", "level": "nominal"},
                {"name": "sales", "type": "number", "level": "quantitative"},
            ]
        },
        "mappings": {
            "rows": {"attributes": ["country"]},
            "measures": {"attributes": ["sales"]},
        },
    }


def _write(tmp_path: Path, payload: dict) -> Path:
    path = tmp_path / "bundle.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_cli_version() -> None:
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "vizrole" in result.stdout


def test_cli_levels_lists_domain_in_order() -> None:
    result = runner.invoke(app, ["levels"])
    assert result.exit_code == 0
    lines = result.stdout.strip().splitlines()
    assert lines == ["nominal\tqualitative", "ordinal\tqualitative", "quantitative\tquantitative"]


def test_cli_validate_prints_report_for_valid_bundle(tmp_path: Path) -> None:
    bundle_path = _write(tmp_path, _bundle())
    result = runner.invoke(app, ["validate", "--bundle", str(bundle_path)])
    assert result.exit_code == 0, result.stdout
    report = json.loads(result.stdout)
    assert report["isValid"] is True
    assert [r["levelEffective"] for r in report["roles"]] == ["ordinal", "quantitative"]


def test_cli_validate_writes_report_file(tmp_path: Path) -> None:
    bundle_path = _write(tmp_path, _bundle())
    out = tmp_path / "out" / "report.json"
    result = runner.invoke(app, ["validate", "--bundle", str(bundle_path), "--output", str(out)])
    assert result.exit_code == 0
    assert "Wrote report" in result.stdout
    report = json.loads(out.read_text(encoding="utf-8"))
    assert report["errors"] == []


def test_cli_validate_exits_1_for_invalid_mappings(tmp_path: Path) -> None:
    bundle = _bundle()
    bundle["mappings"]["rows"]["attributes"] = ["country", "missing"]
    bundle_path = _write(tmp_path, bundle)
    result = runner.invoke(app, ["validate", "--bundle", str(bundle_path)])
    assert result.exit_code == 1
    report = json.loads(result.stdout)
    assert [e["error"] for e in report["errors"]] == ["AttributeNotDefinedInData"]


def test_cli_validate_exits_2_with_envelope_for_bad_bundle(tmp_path: Path) -> None:
    bundle = _bundle()
    del bundle["model"]
    bundle_path = _write(tmp_path, bundle)
    result = runner.invoke(app, ["validate", "--bundle", str(bundle_path)])
    assert result.exit_code == 2
    env = json.loads(result.stdout)
    assert env["error"] == "Validation"
    assert env["details"] == {"section": "bundle"}


def test_cli_validate_exits_2_for_unparseable_json(tmp_path: Path) -> None:
    path = tmp_path / "bundle.json"
    path.write_text("{not json", encoding="utf-8")
    result = runner.invoke(app, ["validate", "--bundle", str(path)])
    assert result.exit_code == 2
    assert "input-parse-error" in result.stdout
