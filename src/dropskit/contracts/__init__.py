"""
Contracts - Typed accessors for the ``drops`` and ``epoch.drops`` contracts.
"""

from .base import Contract, Table
from .drops import DropsContract
from .epoch import EpochContract

__all__ = ["Contract", "Table", "DropsContract", "EpochContract"]
