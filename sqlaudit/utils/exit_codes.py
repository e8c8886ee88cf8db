"""Centralized exit codes for the sqlaudit CLI."""


class ExitCodes:
    """Standard exit codes for sqlaudit commands."""

    SUCCESS = 0

    MISSING_DECLARATIONS = 1

    TASK_INCOMPLETE = 3

    @classmethod
    def get_description(cls, code: int) -> str:
        """Get human-readable description for an exit code."""
        descriptions = {
            cls.SUCCESS: "Success - scan completed",
            cls.MISSING_DECLARATIONS: "SQL variables used in DBI calls without an in-file declaration",
            cls.TASK_INCOMPLETE: "Scan could not be completed (no readable source files)",
        }
        return descriptions.get(code, f"Unknown exit code: {code}")

    @classmethod
    def should_fail_pipeline(cls, code: int) -> bool:
        """Determine if an exit code should fail a CI/CD pipeline."""

        return code >= cls.TASK_INCOMPLETE
