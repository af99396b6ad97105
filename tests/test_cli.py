"""Tests for the command line front-end."""

import json

import pytest

from nested_cli import main
from nested_conversion import declarations_to_json_list
from nested_parser import parse_block

SOURCE = "#![derive(Debug)]\nstruct P { a: i32, struct Q { b: i32 } }\n"


@pytest.fixture
def source_file(tmp_path):
    path = tmp_path / "nested.rs"
    path.write_text(SOURCE, encoding="utf-8")
    return path


def test_cli_prints_flattened_source(source_file, capsys):
    assert main([str(source_file)]) == 0
    out = capsys.readouterr().out
    assert out == (
        "#[derive(Debug)]\n"
        "struct P {\n"
        "    a: i32,\n"
        "    q: Q,\n"
        "}\n"
        "\n"
        "#[derive(Debug)]\n"
        "struct Q {\n"
        "    b: i32,\n"
        "}\n"
    )


def test_cli_writes_output_file(source_file, tmp_path):
    out_path = tmp_path / "flat.rs"
    assert main([str(source_file), "-o", str(out_path)]) == 0
    assert out_path.read_text(encoding="utf-8").startswith("#[derive(Debug)]\nstruct P {")


def test_cli_json_round_trip(source_file, tmp_path, capsys):
    assert main([str(source_file), "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert [d["identity"]["name"] for d in data] == ["P", "Q"]

    json_path = tmp_path / "flat.json"
    json_path.write_text(json.dumps(data), encoding="utf-8")
    assert main([str(json_path), "--from-json"]) == 0
    assert capsys.readouterr().out.startswith("#[derive(Debug)]\nstruct P {\n    a: i32,\n    q: Q,\n}")


def test_cli_ast(source_file, capsys):
    assert main([str(source_file), "--ast"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["root"]["fields"][1]["__type__"] == "NestedField"


def test_cli_reports_errors(tmp_path):
    bad = tmp_path / "bad.rs"
    bad.write_text("struct P { a i32 }", encoding="utf-8")
    with pytest.raises(SystemExit) as exc_info:
        main([str(bad)])
    assert "Error flattening" in str(exc_info.value.code)

    with pytest.raises(SystemExit) as exc_info:
        main([str(tmp_path / "missing.rs"), "--max-depth", "0"])
    assert "--max-depth" in str(exc_info.value.code)


def test_cli_depth_limit(source_file):
    with pytest.raises(SystemExit) as exc_info:
        main([str(source_file), "--max-depth", "1"])
    assert "Nesting depth 2" in str(exc_info.value.code)


def test_cli_from_json_flattens_nested_declarations(tmp_path, capsys):
    root = parse_block("struct P { a: i32, struct Q { b: i32 } }").root
    json_path = tmp_path / "nested.json"
    json_path.write_text(json.dumps(declarations_to_json_list([root])), encoding="utf-8")

    assert main([str(json_path), "--from-json"]) == 0
    assert capsys.readouterr().out == (
        "struct P {\n"
        "    a: i32,\n"
        "    q: Q,\n"
        "}\n"
        "\n"
        "struct Q {\n"
        "    b: i32,\n"
        "}\n"
    )

    with pytest.raises(SystemExit) as exc_info:
        main([str(json_path), "--from-json", "--max-depth", "1"])
    assert "Nesting depth 2" in str(exc_info.value.code)


@pytest.mark.parametrize("flag", ["--json", "--ast"])
def test_cli_from_json_excludes_other_modes(source_file, flag, capsys):
    with pytest.raises(SystemExit) as exc_info:
        main([str(source_file), "--from-json", flag])
    assert exc_info.value.code == 2
    assert "not allowed with argument" in capsys.readouterr().err
