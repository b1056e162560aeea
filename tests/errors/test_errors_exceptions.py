import unittest

from boxplan.errors.exceptions import (
    STEP_ERRORS,
    BoxPlanError,
    CommandError,
    CopyError,
    EngineError,
    PathError,
    PlanValidationError,
)


class TestExceptions(unittest.TestCase):
    def test_base_error_keeps_details_and_cause(self) -> None:
        cause = RuntimeError("root")
        err = BoxPlanError("msg", details={"k": "v"}, cause=cause)
        self.assertEqual(str(err), "msg")
        self.assertEqual(err.details["k"], "v")
        self.assertIs(err.cause, cause)

    def test_details_default_to_empty_dict(self) -> None:
        err = CopyError("missing")
        self.assertEqual(err.details, {})
        self.assertIsNone(err.cause)

    def test_command_error_carries_exit_code(self) -> None:
        err = CommandError("boom", exit_code=3, output="log", details={"command": "false"})
        self.assertEqual(err.exit_code, 3)
        self.assertEqual(err.output, "log")
        self.assertEqual(err.details["exit_code"], 3)
        self.assertEqual(err.details["command"], "false")

    def test_hierarchy(self) -> None:
        for cls in (CopyError, PathError, CommandError, EngineError, PlanValidationError):
            self.assertTrue(issubclass(cls, BoxPlanError))

    def test_step_errors_are_the_fatal_step_taxonomy(self) -> None:
        self.assertEqual(set(STEP_ERRORS), {CopyError, PathError, CommandError})


if __name__ == "__main__":
    unittest.main()
