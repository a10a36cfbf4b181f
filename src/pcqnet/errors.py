"""
Exception hierarchy for pcqnet.

Warning convention:
    Data-quality problems (unparseable numbers, missing ratios or scores) are
    never raised; they are logged at DEBUG and the value is treated as absent.
    Only the conditions below interrupt work.
"""

from __future__ import annotations

__all__ = [
    'PCQError',
    'PeptideNotInNodeError',
    'GraphExportError',
    'ModelFormatError',
]


class PCQError(Exception):
    """Base class for all pcqnet errors."""
    pass


class PeptideNotInNodeError(PCQError, ValueError):
    """Raised when a peptide node is queried for a peptide it does not contain."""
    pass


class GraphExportError(PCQError, OSError):
    """Raised when a graph document cannot be written to disk."""
    pass


class ModelFormatError(PCQError, ValueError):
    """Raised when a serialized cluster model is malformed."""
    pass
