"""Exception hierarchy for phylopdf.

Every user-visible failure is a subclass of :class:`PhyloPdfError`; the command
line entry point catches it, prints the message and exits with status 1.
"""


class PhyloPdfError(Exception):
    """Base class for all errors raised by phylopdf."""


class InputOutputError(PhyloPdfError):
    """Raised when a file cannot be opened, read or written."""


class FormatUnrecognizedError(PhyloPdfError):
    """Raised when the input is neither Newick nor a JSON tree."""


class ParsingError(PhyloPdfError):
    """Raised when Newick text does not follow the grammar."""


class JsonStructureError(PhyloPdfError):
    """Raised when a JSON tree has an unexpected shape or version."""


class DecompressionError(PhyloPdfError):
    """Raised when an xz stream cannot be decoded."""


class DateFormatError(PhyloPdfError, ValueError):
    pass


class ColorFormatError(PhyloPdfError, ValueError):
    pass


class SurfaceInitError(PhyloPdfError):
    """Raised when the PDF drawing surface cannot be created."""
