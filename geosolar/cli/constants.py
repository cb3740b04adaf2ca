"""Exit codes shared by the CLI commands."""

VALIDATION_EXIT_CODE = 10
SOURCE_EXIT_CODE = 20
SYSTEM_EXIT_CODE = 30
RECONCILE_EXIT_CODE = 40

__all__ = [
    "RECONCILE_EXIT_CODE",
    "SOURCE_EXIT_CODE",
    "SYSTEM_EXIT_CODE",
    "VALIDATION_EXIT_CODE",
]
