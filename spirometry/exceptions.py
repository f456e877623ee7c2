"""
exceptions.py
=============
Error and warning types raised by the spirometry equations

Two tiers:
- UsageError aborts the whole call before any element is evaluated
- Per-element problems never raise; they surface as <NA> in the result
"""


class SpirometryError(Exception):
    """Base class for all package errors"""
    pass


class UsageError(SpirometryError, ValueError):
    """
    Call-level misuse of a prediction function.

    Raised for a missing or ambiguous measure selection, vectors of
    different lengths, and (Wang only) sex codes outside {'m', 'f'}.
    """
    pass


class CoefficientTableError(SpirometryError):
    """A literal coefficient table violates its key or shape invariants"""
    pass


class ConfigurationError(SpirometryError):
    """Invalid or incomplete batch configuration"""
    pass


class ImplausibleHeightWarning(UserWarning):
    """Heights outside the plausible range, usually a unit mix-up"""
    pass
