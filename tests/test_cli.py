import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from unittest.mock import patch

from boxplan.cli import EXIT_BOXPLAN_ERROR, build_parser, main
from boxplan.config import Settings

PLAN = """
from: golang
vars:
  DEST: /go/src/x
steps:
  - copy: {src: ., dst: "${DEST}"}
  - workdir: "${DEST}"
  - run: {command: "mkdir vendor", unless_dir: vendor}
  - set_exec: {entrypoint: [/bin/sh], cmd: [-c, test]}
"""


class TestCli(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.context = os.path.join(self._tmp.name, "ctx")
        self.root = os.path.join(self._tmp.name, "root")
        os.makedirs(self.context)
        with open(os.path.join(self.context, "main.go"), "w", encoding="utf-8") as f:
            f.write("package main\n")
        self.plan_path = os.path.join(self._tmp.name, "plan.yaml")
        self._write_plan(PLAN)

        patcher = patch("boxplan.cli.load_settings", return_value=Settings())
        patcher.start()
        self.addCleanup(patcher.stop)
        patcher = patch("boxplan.cli.setup_logging")
        patcher.start()
        self.addCleanup(patcher.stop)

    def _write_plan(self, content: str) -> None:
        with open(self.plan_path, "w", encoding="utf-8") as f:
            f.write(content)

    def _main(self, *argv: str) -> tuple[int, str, str]:
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = main(list(argv))
        return code, out.getvalue(), err.getvalue()

    def test_show(self) -> None:
        code, out, _ = self._main("show", self.plan_path, "--var", "DEST=/src")
        self.assertEqual(code, 0)
        lines = out.splitlines()
        self.assertEqual(lines[0], "FROM golang")
        self.assertIn("WORKDIR /src", lines[2])
        self.assertIn("RUN [dir_missing(vendor)] mkdir vendor", lines[3])

    def test_build_local(self) -> None:
        code, out, _ = self._main(
            "build", self.plan_path, "--context", self.context, "--root", self.root
        )
        self.assertEqual(code, 0)
        artifact = json.loads(out)
        self.assertEqual(artifact["workdir"], "/go/src/x")
        self.assertEqual(artifact["entrypoint"], ["/bin/sh"])
        self.assertEqual(artifact["cmd"], ["-c", "test"])
        self.assertEqual(artifact["engine"], "local")
        self.assertTrue(os.path.isdir(os.path.join(self.root, "go", "src", "x", "vendor")))

    def test_build_command_failure_uses_exit_code(self) -> None:
        self._write_plan("from: alpine\nsteps:\n  - run: exit 5\n")
        code, _, err = self._main(
            "build", self.plan_path, "--context", self.context, "--root", self.root
        )
        self.assertEqual(code, 5)
        self.assertIn("status 5", err)

    def test_invalid_plan_exits_125(self) -> None:
        self._write_plan("from: alpine\nsteps:\n  - explode: now\n")
        code, _, err = self._main("show", self.plan_path)
        self.assertEqual(code, EXIT_BOXPLAN_ERROR)
        self.assertIn("Unknown directive", err)

    def test_bad_var_exits_125(self) -> None:
        code, _, _ = self._main("show", self.plan_path, "--var", "NOEQUALS")
        self.assertEqual(code, EXIT_BOXPLAN_ERROR)

    def test_command_status_2_is_distinct_from_plan_errors(self) -> None:
        self._write_plan("from: alpine\nsteps:\n  - run: exit 2\n")
        code, _, err = self._main(
            "build", self.plan_path, "--context", self.context, "--root", self.root
        )
        self.assertEqual(code, 2)
        self.assertIn("error: Command exited with status 2", err)

        self._write_plan("from: alpine\nsteps:\n  - copy: [missing, /x]\n")
        code, _, err = self._main(
            "build", self.plan_path, "--context", self.context, "--root", self.root
        )
        self.assertEqual(code, EXIT_BOXPLAN_ERROR)
        self.assertIn("does not exist", err)

    def test_help_documents_exit_status(self) -> None:
        text = build_parser().format_help()
        self.assertIn("exit status:", text)
        self.assertIn("125", text)


if __name__ == "__main__":
    unittest.main()
