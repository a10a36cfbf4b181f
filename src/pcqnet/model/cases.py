"""
Classification cases for protein pairs.

A protein pair is classified by comparing the ratios of its shared peptides
against the ratios of the peptides unique to each protein. Inconsistent cases
point at a protein form that changes differently from its partner.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

__all__ = ['ClassificationCase']


class ClassificationCase(Enum):
    """
    Consistency pattern observed for a protein pair.

    Each member carries ``(case_id, explanation, is_inconsistent)``.
    ``NO_EVIDENCE`` is reserved: it marks pairs with nothing to compare and is
    never exported as its own network.
    """

    CONSISTENT = (1, "Shared and unique peptides are consistent", False)
    UNIQUE_1_INCONSISTENT = (
        2, "Unique peptides of protein 1 are inconsistent with the shared peptides", True)
    UNIQUE_2_INCONSISTENT = (
        3, "Unique peptides of protein 2 are inconsistent with the shared peptides", True)
    BOTH_UNIQUE_INCONSISTENT = (
        4, "Unique peptides of both proteins are inconsistent with the shared peptides", True)
    SHARED_INCONSISTENT = (5, "Shared peptides are inconsistent among them", True)
    NO_EVIDENCE = (6, "No unique peptide evidence to compare", False)

    def __init__(self, case_id: int, explanation: str, is_inconsistent: bool):
        self.case_id = case_id
        self.explanation = explanation
        self.is_inconsistent = is_inconsistent

    @classmethod
    def by_case_id(cls, case_id: int) -> Optional["ClassificationCase"]:
        for case in cls:
            if case.case_id == case_id:
                return case
        return None

    @classmethod
    def exportable(cls) -> list["ClassificationCase"]:
        """Cases that get their own per-classification network."""
        return [case for case in cls if case is not cls.NO_EVIDENCE]
