"""
Tests for the ngcc-reflect CLI.

Verifies:
1. Exit codes for success, aborted passes and missing entry points.
2. `--json` writes a parseable report to stdout only.
3. `--trace` dumps diagnostics to a file.
4. Configuration errors are reported instead of raised.
5. The human readable summary lists classes and definitions.
"""

import io
import json
from unittest.mock import patch

import pytest
from rich.console import Console

from ngcc_reflect.cli.__main__ import main
from ngcc_reflect.utils.console import reset_console, set_console

PACKAGE = {
  "__init__.py": """
    from angular.core import Injectable, Optional

    class Engine:
      pass

    class Car:
      def __init__(self, engine: Engine):
        pass

    Car.decorators = [{"type": Injectable, "args": [{"provided_in": "root"}]}]
    """,
}

BROKEN = {
  "__init__.py": """
    from angular.core import Injectable

    class Car:
      def __init__(self, engine):
        pass

    Car.decorators = [{"type": Injectable}]
    """,
}


def test_success_exit_code(write_package, capsys):
  root = write_package(PACKAGE)
  assert main([str(root)]) == 0
  # Human readable output never goes to stdout
  assert capsys.readouterr().out == ""


def test_json_output(write_package, capsys):
  root = write_package(PACKAGE)

  with patch("ngcc_reflect.cli.commands.log_info") as mock_log:
    ret = main([str(root), "--json"])

  assert ret == 0
  mock_log.assert_not_called()
  report = json.loads(capsys.readouterr().out)
  assert report["success"] is True
  assert report["decorated_classes"]["injectables"] == ["Car"]
  assert report["definitions"] == [
    'Car.ng_injectable_def = define_injectable(token=Car, provided_in="root", '
    "factory=lambda: Car(inject(Engine)))\n"
  ]


def test_aborted_pass_exit_code(write_package, capsys):
  root = write_package(BROKEN)
  assert main([str(root), "--json"]) == 1
  report = json.loads(capsys.readouterr().out)
  assert report["success"] is False
  assert "No suitable token for parameter 'engine'" in report["errors"][0]


def test_aborted_pass_logs_error(write_package):
  root = write_package(BROKEN)
  with patch("ngcc_reflect.cli.commands.log_error") as mock_error:
    assert main([str(root)]) == 1
  assert "engine" in mock_error.call_args[0][0]


@pytest.fixture
def recorded_output():
  """Routes the console and log output into a buffer for the duration of a test."""
  buffer = io.StringIO()
  set_console(Console(file=buffer, width=200))
  yield buffer
  reset_console()


def test_summary_lists_classes_and_definitions(write_package, recorded_output):
  root = write_package(PACKAGE)
  assert main([str(root)]) == 0

  output = recorded_output.getvalue()
  assert "Decorated classes" in output
  assert "injectables" in output
  assert "Car.ng_injectable_def = define_injectable(token=Car" in output
  assert "1 decorated classes, 1 definitions emitted" in output


def test_missing_entry_point(write_package):
  root = write_package({"other.py": ""})
  with patch("ngcc_reflect.cli.commands.log_error") as mock_error:
    assert main([str(root)]) == 1
  assert "Entry point not found" in mock_error.call_args[0][0]


def test_entry_point_outside_root(write_package):
  """
  Scenario: `--entry-point` names an existing file above the package root.
  Expectation: Exit code 1 with a logged error instead of a traceback.
  """
  root = write_package(PACKAGE)
  (root.parent / "outside.py").write_text("", "utf-8")

  with patch("ngcc_reflect.cli.commands.log_error") as mock_error:
    assert main([str(root), "--entry-point", "../outside.py"]) == 1
  assert "not inside package root" in mock_error.call_args[0][0]


def test_entry_point_and_core_module_flags(write_package, capsys):
  root = write_package(
    {
      "api.py": """
        from ng.core import Injectable

        class Car:
          pass

        Car.decorators = [{"type": Injectable}]
        """,
    }
  )
  assert main([str(root), "--entry-point", "api.py", "--core-module", "ng.core", "--json"]) == 0
  report = json.loads(capsys.readouterr().out)
  assert report["decorated_classes"]["injectables"] == ["Car"]


def test_invalid_core_module(write_package):
  root = write_package(PACKAGE)
  with patch("ngcc_reflect.cli.__main__.log_error") as mock_error:
    assert main([str(root), "--core-module", "not a module"]) == 1
  assert "Invalid configuration" in mock_error.call_args[0][0]


def test_trace_file(write_package, tmp_path):
  root = write_package(PACKAGE)
  trace = tmp_path / "trace.json"
  assert main([str(root), "--json", "--trace", str(trace)]) == 0

  events = json.loads(trace.read_text("utf-8"))
  codes = {e["code"] for e in events}
  assert {"phase_start", "annotation_matched", "definition_emitted"} <= codes


def test_version(capsys):
  with pytest.raises(SystemExit) as excinfo:
    main(["--version"])
  assert excinfo.value.code == 0
  assert "0.1.0" in capsys.readouterr().out
