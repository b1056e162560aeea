import unittest

from boxplan.errors import PlanValidationError
from boxplan.plan import Directive, PlanBuilder, vendor_missing


class TestPlanBuilder(unittest.TestCase):
    def test_records_steps_in_order(self) -> None:
        plan = (
            PlanBuilder("golang")
            .copy(".", "/go/src/x")
            .workdir("/go/src/x")
            .run("go get github.com/LK4D4/vndr && vndr", guard=vendor_missing())
            .set_exec(entrypoint=["/usr/bin/env"], cmd=["/bin/sh", "-c", "go test ./..."])
            .build()
        )

        self.assertEqual(plan.base_image, "golang")
        self.assertEqual(
            [s.directive for s in plan.step_order()],
            [Directive.COPY, Directive.WORKDIR, Directive.RUN, Directive.SET_EXEC],
        )
        self.assertEqual([s.seq for s in plan.steps], [0, 1, 2, 3])
        self.assertEqual(len({s.step_id for s in plan.steps}), 4)
        self.assertEqual(plan.steps[2].guard.kind, "dir_missing")
        self.assertIsNotNone(plan.created_at.tzinfo)

    def test_invalid_step_rejected_immediately(self) -> None:
        builder = PlanBuilder("golang")
        with self.assertRaises(PlanValidationError) as cm:
            builder.workdir("")
        self.assertEqual(cm.exception.details["directive"], "WORKDIR")
        self.assertEqual(builder.list_steps(), [])

    def test_base_image_required(self) -> None:
        with self.assertRaises(PlanValidationError):
            PlanBuilder(" ")

    def test_set_exec_copies_sequences(self) -> None:
        entry = ["/bin/sh"]
        plan = PlanBuilder("alpine").set_exec(entrypoint=entry).build()
        entry.append("-x")
        self.assertEqual(plan.steps[0].entrypoint, ["/bin/sh"])
        self.assertIsNone(plan.steps[0].cmd)


if __name__ == "__main__":
    unittest.main()
