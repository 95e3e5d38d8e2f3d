# -*- coding: utf-8 -*-
"""
Exceptions raised by block matrix operations.

None of these are retried: every transformation is deterministic, so running
the same inputs again reproduces the same failure.
"""


class BlockMatrixError(Exception):
    """Base class for every error raised by block matrix operations."""


class ConfigurationError(BlockMatrixError, ValueError):
    """Bad tile size or partition count, detected at construction."""


class DimensionMismatchError(BlockMatrixError, ValueError):
    """Operand dimensions do not line up for add / multiply."""


class StructuralError(BlockMatrixError):
    """Duplicate block coordinates or a block with the wrong shape."""


class CapacityError(BlockMatrixError):
    """The matrix is too large to be materialized on one host."""


class UnsupportedRepresentationError(BlockMatrixError, TypeError):
    """A local block that is neither dense nor sparse."""
