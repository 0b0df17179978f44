"""
Indexed entity model

Provides:
  - TokenHolder / Delegate / Proposal / Vote / Governance  (models.py)
  - ProposalState / VoteChoice                              (models.py)
  - to_decimal                                              (models.py)
"""

from .models import (
    ENTITY_TYPES,
    Delegate,
    Governance,
    Proposal,
    ProposalState,
    TokenHolder,
    Vote,
    VoteChoice,
    to_decimal,
)

__all__ = [
    "ENTITY_TYPES",
    "Delegate",
    "Governance",
    "Proposal",
    "ProposalState",
    "TokenHolder",
    "Vote",
    "VoteChoice",
    "to_decimal",
]
