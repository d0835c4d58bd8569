"""
Error taxonomy for the PMAC0 tag engine.

Boundary failures (input files, tag files, configuration) are raised once
where they are detected and reported once by the command-line wrapper.
The core computation assumes validated input.
"""


class PMACError(Exception):
    """Base class for all pmac0 errors."""


class InputError(PMACError):
    """Raised when the target file cannot be opened or read."""


class TagFileError(InputError):
    """Raised when a tag file is missing, unreadable or malformed."""


class ConfigurationError(PMACError, ValueError):
    """Raised for unknown variants, invalid keys or an invalid worker setup."""


class ReductionError(PMACError):
    """Raised when the reduction barrier sees an incomplete set of partial tags."""
