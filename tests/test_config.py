import unittest

from boxplan.config import Settings, load_settings
from boxplan.errors import PlanValidationError


class TestLoadSettings(unittest.TestCase):
    def test_defaults(self) -> None:
        self.assertEqual(load_settings({}), Settings())

    def test_reads_values(self) -> None:
        settings = load_settings(
            {
                "BOXPLAN_ENGINE": "Docker",
                "BOXPLAN_ROOT": "/tmp/r",
                "BOXPLAN_SHELL": "/bin/bash",
                "BOXPLAN_COMMAND_TIMEOUT": "90",
                "BOXPLAN_IMAGE_REPOSITORY": "tarutil",
                "BOXPLAN_IMAGE_TAG": "ci",
                "BOXPLAN_LOG_LEVEL": "debug",
            }
        )
        self.assertEqual(settings.engine, "docker")
        self.assertEqual(settings.root, "/tmp/r")
        self.assertEqual(settings.shell, "/bin/bash")
        self.assertEqual(settings.command_timeout, 90.0)
        self.assertEqual(settings.image_repository, "tarutil")
        self.assertEqual(settings.image_tag, "ci")
        self.assertEqual(settings.log_level, "DEBUG")

    def test_invalid_values(self) -> None:
        for env in (
            {"BOXPLAN_ENGINE": "podman"},
            {"BOXPLAN_COMMAND_TIMEOUT": "soon"},
            {"BOXPLAN_COMMAND_TIMEOUT": "-1"},
            {"BOXPLAN_LOG_LEVEL": "LOUD"},
        ):
            with self.subTest(env=env):
                with self.assertRaises(PlanValidationError):
                    load_settings(env)


if __name__ == "__main__":
    unittest.main()
