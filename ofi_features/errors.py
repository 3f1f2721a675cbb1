"""
Exception taxonomy for the OFI feature library.

Every error raised by the package derives from OFIError so callers can
catch the whole family at their driver boundary. The concrete classes also
inherit from the matching builtin, which keeps ``except ValueError`` style
handlers working.
"""


class OFIError(Exception):
    """Base class for all OFI feature errors."""


class ContractViolation(OFIError, ValueError):
    """
    Caller error: level out of range, mismatched lengths or depths,
    too few training observations.
    """


class NotTrainedError(OFIError, RuntimeError):
    """A trained component was used before ``train``/``fit`` succeeded."""


class NumericDegeneracy(OFIError, ArithmeticError):
    """A result cannot be defined at all (e.g. zero-variance PCA corpus)."""
