import json
import logging

from click.testing import CliRunner

from dtsgen.cli import main
from dtsgen.logger import setup_logging

SOURCE = """
/**
 * Greets someone.
 * @param {string} name
 * @return {string}
 */
exports.greet = function (name) { return "hi " + name; };
"""


def _write(tmp_path, code, name="lib.js"):
    path = tmp_path / name
    path.write_text(code, encoding="utf-8")
    return path


def test_generate_prints_declaration(tmp_path):
    src = _write(tmp_path, SOURCE)
    result = CliRunner().invoke(main, ["generate", str(src)])

    assert result.exit_code == 0, result.output
    assert 'declare module "lib" {' in result.output
    assert "export function greet (name: string) : string;" in result.output


def test_generate_writes_out_file(tmp_path):
    src = _write(tmp_path, SOURCE)
    out = tmp_path / "lib.d.ts"
    result = CliRunner().invoke(main, ["generate", str(src), str(out)])

    assert result.exit_code == 0, result.output
    text = out.read_text(encoding="utf-8")
    assert text.startswith('declare module "lib" {')
    assert "\x1b[" not in text


def test_generate_uses_module_name_from_environment(tmp_path):
    src = _write(tmp_path, SOURCE)
    result = CliRunner().invoke(
        main, ["generate", str(src)], env={"DTSGEN_MODULE_NAME": "greeter"}
    )

    assert result.exit_code == 0, result.output
    assert 'declare module "greeter" {' in result.output


def test_generate_reports_fatal_errors(tmp_path):
    src = _write(tmp_path, "while (true) {}")
    result = CliRunner().invoke(main, ["generate", str(src)])

    assert result.exit_code == 1
    assert "Error: Unexpected node type: while_statement" in result.output


def test_inspect_prints_model_json(tmp_path):
    src = _write(tmp_path, SOURCE)
    result = CliRunner().invoke(main, ["inspect", str(src)])

    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["name"] == "lib"
    greet = data["items"]["greet"]
    assert greet["kind"] == "function"
    assert greet["exported"] is True
    assert greet["params"][0]["types"] == [
        {"namespace": None, "name": "string", "parameters": []}
    ]


def test_debug_logging_comes_from_environment(tmp_path):
    src = _write(tmp_path, SOURCE)
    try:
        result = CliRunner().invoke(
            main, ["generate", str(src)], env={"DTSGEN_DEBUG": "1"}
        )
        assert result.exit_code == 0, result.output
        assert logging.getLogger().level == logging.DEBUG
    finally:
        setup_logging(False)
    assert logging.getLogger().level == logging.WARNING


def test_group_takes_no_options_besides_help(tmp_path):
    src = _write(tmp_path, SOURCE)
    result = CliRunner().invoke(main, ["--debug", "generate", str(src)])

    assert result.exit_code == 2
    assert "No such option: --debug" in result.output
