"""Custom exceptions for sqlaudit.

Only failure modes that callers handle explicitly get a class here. An
assignment the resolver cannot attribute is not an error: the finding is
simply kept without a variable.
"""


class ParseFailure(Exception):
    """Raised when a source file cannot be read, decoded or parsed.

    The runner catches this per file, logs it and leaves the file out of
    the report. It is never fatal to a run.

    Attributes:
        path: File the failure belongs to (may be empty for in-memory input)
        reason: Short human-readable cause
    """

    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot parse {path or '<memory>'}: {reason}")
        self.path = path
        self.reason = reason


class ConfigError(ValueError):
    """Raised for a configuration value that cannot be coerced to its default's type."""

    def __init__(self, key: str, value: object, details: str = ""):
        message = f"Invalid value for {key}: {value!r}"
        if details:
            message = f"{message} ({details})"
        super().__init__(message)
        self.key = key
        self.value = value
