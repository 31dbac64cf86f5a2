"""
Exception types raised by the cybersim core.
"""


class CybersimError(Exception):
    """Base class for all cybersim errors."""


class ConfigurationError(CybersimError, ValueError):
    """
    Raised (or returned, from the facade) when configuration is rejected.

    ``problems`` lists every invalid field found, not just the first one.
    """

    def __init__(self, problems: list[str] | str):
        if isinstance(problems, str):
            problems = [problems]
        self.problems: list[str] = list(problems)
        super().__init__("; ".join(self.problems))


class InvariantViolation(CybersimError, AssertionError):
    """A simulated value left its allowed range at a tick boundary."""
