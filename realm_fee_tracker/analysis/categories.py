"""
Action categories and the static lookup tables the classifier reads.

Three tables feed the classifier tiers: program log instruction names,
first-byte instruction discriminators, and field names of pre-decoded
(parsed) instruction objects. All three are derived from the one ordered
list of SPL Governance instructions so they cannot drift apart.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable


class ActionCategory(str, Enum):
    """Governance action categories; each is its own cost bucket."""

    VOTE = "Vote"
    PROPOSAL = "Proposal"
    COMMENT = "Comment"
    TOKEN_DEPOSIT = "Token Deposit"
    TOKEN_WITHDRAWAL = "Token Withdrawal"
    DELEGATE = "Delegate"
    EXECUTE_TRANSACTION = "Execute Transaction"
    SIGNATORY = "Signatory"
    PROPOSAL_INSTRUCTION = "Proposal Instruction"
    GOVERNANCE_ADMIN = "Governance Admin"
    REFUND = "Refund"
    OTHER_GOVERNANCE = "Other Governance"


# SPL Governance instructions in discriminator order (index == first data byte).
GOVERNANCE_INSTRUCTIONS: tuple[str, ...] = (
    "CreateRealm",               # 0
    "DepositGoverningTokens",    # 1
    "WithdrawGoverningTokens",   # 2
    "SetGovernanceDelegate",     # 3
    "CreateGovernance",          # 4
    "CreateProgramGovernance",   # 5
    "CreateProposal",            # 6
    "AddSignatory",              # 7
    "RemoveSignatory",           # 8
    "InsertTransaction",         # 9
    "RemoveTransaction",         # 10
    "CancelProposal",            # 11
    "SignOffProposal",           # 12
    "CastVote",                  # 13
    "FinalizeVote",              # 14
    "RelinquishVote",            # 15
    "ExecuteTransaction",        # 16
    "CreateMintGovernance",      # 17
    "CreateTokenGovernance",     # 18
    "SetGovernanceConfig",       # 19
    "FlagTransactionError",      # 20
    "SetRealmAuthority",         # 21
    "SetRealmConfig",            # 22
    "CreateTokenOwnerRecord",    # 23
    "UpdateProgramMetadata",     # 24
    "CreateNativeTreasury",      # 25
    "RevokeGoverningTokens",     # 26
    "RefundProposalDeposit",     # 27
    "CompleteProposal",          # 28
)

INSTRUCTION_NAME_CATEGORIES: dict[str, ActionCategory] = {
    "CastVote": ActionCategory.VOTE,
    "RelinquishVote": ActionCategory.VOTE,
    "CreateProposal": ActionCategory.PROPOSAL,
    "SignOffProposal": ActionCategory.PROPOSAL,
    "CancelProposal": ActionCategory.PROPOSAL,
    "FinalizeVote": ActionCategory.PROPOSAL,
    "CompleteProposal": ActionCategory.PROPOSAL,
    "DepositGoverningTokens": ActionCategory.TOKEN_DEPOSIT,
    "CreateTokenOwnerRecord": ActionCategory.TOKEN_DEPOSIT,
    "WithdrawGoverningTokens": ActionCategory.TOKEN_WITHDRAWAL,
    "SetGovernanceDelegate": ActionCategory.DELEGATE,
    "ExecuteTransaction": ActionCategory.EXECUTE_TRANSACTION,
    "AddSignatory": ActionCategory.SIGNATORY,
    "RemoveSignatory": ActionCategory.SIGNATORY,
    "InsertTransaction": ActionCategory.PROPOSAL_INSTRUCTION,
    "RemoveTransaction": ActionCategory.PROPOSAL_INSTRUCTION,
    "CreateRealm": ActionCategory.GOVERNANCE_ADMIN,
    "CreateGovernance": ActionCategory.GOVERNANCE_ADMIN,
    "CreateProgramGovernance": ActionCategory.GOVERNANCE_ADMIN,
    "CreateMintGovernance": ActionCategory.GOVERNANCE_ADMIN,
    "CreateTokenGovernance": ActionCategory.GOVERNANCE_ADMIN,
    "SetGovernanceConfig": ActionCategory.GOVERNANCE_ADMIN,
    "FlagTransactionError": ActionCategory.GOVERNANCE_ADMIN,
    "SetRealmAuthority": ActionCategory.GOVERNANCE_ADMIN,
    "SetRealmConfig": ActionCategory.GOVERNANCE_ADMIN,
    "UpdateProgramMetadata": ActionCategory.GOVERNANCE_ADMIN,
    "CreateNativeTreasury": ActionCategory.GOVERNANCE_ADMIN,
    "RevokeGoverningTokens": ActionCategory.GOVERNANCE_ADMIN,
    "RefundProposalDeposit": ActionCategory.REFUND,
}

DISCRIMINATOR_CATEGORIES: dict[int, ActionCategory] = {
    index: INSTRUCTION_NAME_CATEGORIES[name]
    for index, name in enumerate(GOVERNANCE_INSTRUCTIONS)
}

# Chat program: PostMessage is instruction 0.
CHAT_DISCRIMINATOR_CATEGORIES: dict[int, ActionCategory] = {
    0: ActionCategory.COMMENT,
}


def _lower_camel(name: str) -> str:
    return name[:1].lower() + name[1:]


PARSED_KEY_CATEGORIES: dict[str, ActionCategory] = {
    "vote": ActionCategory.VOTE,
    "proposal": ActionCategory.PROPOSAL,
    **{_lower_camel(name): INSTRUCTION_NAME_CATEGORIES[name] for name in GOVERNANCE_INSTRUCTIONS},
}


def category_for_instruction_name(name: str) -> ActionCategory:
    """Log instruction name -> category; unknown governance names -> OTHER_GOVERNANCE."""
    return INSTRUCTION_NAME_CATEGORIES.get(name.strip(), ActionCategory.OTHER_GOVERNANCE)


def category_for_parsed_key(key: str) -> ActionCategory | None:
    """Parsed-object field name (camelCase or PascalCase) -> category, or None."""
    if not key:
        return None
    return PARSED_KEY_CATEGORIES.get(key) or PARSED_KEY_CATEGORIES.get(_lower_camel(key))


# Parsed keys in category precedence order: vote keys before proposal keys, etc.
PARSED_KEY_PRECEDENCE: tuple[tuple[str, ActionCategory], ...] = tuple(
    sorted(PARSED_KEY_CATEGORIES.items(), key=lambda item: list(ActionCategory).index(item[1]))
)


def category_for_parsed_payload(payload_keys: Iterable[str]) -> ActionCategory | None:
    """Highest-precedence category among a parsed object's field names, or None."""
    present = {_lower_camel(str(key)) for key in payload_keys}
    for key, category in PARSED_KEY_PRECEDENCE:
        if key in present:
            return category
    return None
