"""
Exception types for formcheck.

Only configuration problems are raised. Validation failures are reported as
data (see formcheck.rules.ValidationError).
"""


class FormCheckError(Exception):
    """Base class for all formcheck exceptions."""


class ConfigurationError(FormCheckError, ValueError):
    """A form definition is malformed (duplicate field, dangling rule, missing callback)."""
