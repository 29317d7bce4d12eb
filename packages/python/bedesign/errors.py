"""
bedesign Errors

Exception types raised by the library. Invalid inputs are rejected at the
boundary of each public function; nothing is silently clamped.
"""

from __future__ import annotations


class BEDesignError(Exception):
    """Base class for all bedesign errors."""


class InvalidParameterError(BEDesignError, ValueError):
    """A parameter is outside its valid domain (n <= 0, cv_pct < 0, ...)."""


class FormulationError(BEDesignError, ValueError):
    """No formulation label could be derived for a dataset."""


class EndpointNotFoundError(BEDesignError, KeyError):
    """The requested endpoint column is not present in the dataset."""

    def __str__(self) -> str:
        # KeyError repr-quotes its message
        return str(self.args[0]) if self.args else ""


class DatasetNotFoundError(BEDesignError, KeyError):
    """No packaged dataset is registered under the requested name."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""
