"""
Tiered governance transaction classifier.

The same governance instruction shows up differently depending on the RPC
response shape and on what the program logged, so classification is an
ordered tuple of pure tier functions, first non-None result wins:

1. program logs ("GOVERNANCE-INSTRUCTION: <Name>", chat program invoke)
2. first-byte discriminators of top-level raw instruction payloads
3. field names of top-level pre-decoded (parsed) instruction objects
4. tiers 2 and 3 over inner (CPI) instructions
5. governance program invoked anywhere -> OTHER_GOVERNANCE

A transaction no tier matches is not governance activity and is rejected.
Malformed payloads (DataShapeError) count as "no match" for that instruction.
"""

from __future__ import annotations

import base64
import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable

import base58

from realm_fee_tracker.analysis.accessors import (
    get_account_keys,
    get_fee_payer,
    get_log_messages,
    get_meta,
    get_program_id,
    inner_instructions,
    top_level_instructions,
)
from realm_fee_tracker.analysis.categories import (
    CHAT_DISCRIMINATOR_CATEGORIES,
    DISCRIMINATOR_CATEGORIES,
    ActionCategory,
    category_for_instruction_name,
    category_for_parsed_key,
    category_for_parsed_payload,
)
from realm_fee_tracker.analysis.costs import calculate_cost
from realm_fee_tracker.analysis.models import ClassifiedTransaction
from realm_fee_tracker.constants import GOVERNANCE_CHAT_PROGRAM_ID, GOVERNANCE_PROGRAM_ID
from realm_fee_tracker.core.exceptions import DataShapeError
from realm_fee_tracker.tracker_logging import get_logger, short

logger = get_logger(__name__)

GOVERNANCE_LOG_RE = re.compile(r"GOVERNANCE-INSTRUCTION:\s*(\w+)")

ENCODING_BASE64 = "base64"
ENCODING_BASE58 = "base58"


@dataclass(frozen=True)
class ClassifierContext:
    """Program ids the tiers match against and how raw string payloads are encoded."""

    governance_program_id: str = GOVERNANCE_PROGRAM_ID
    chat_program_id: str = GOVERNANCE_CHAT_PROGRAM_ID
    data_encoding: str = ENCODING_BASE64

    @property
    def programs(self) -> frozenset[str]:
        return frozenset((self.governance_program_id, self.chat_program_id))


def decode_discriminator(data: Any, encoding: str = ENCODING_BASE64) -> int:
    """
    First byte of an instruction payload.

    Accepts an encoded string (base64 or base58 per `encoding`), bytes, or a
    list of ints. Raises DataShapeError if the payload is empty or cannot be
    decoded.
    """
    if isinstance(data, str):
        try:
            if encoding == ENCODING_BASE58:
                raw = base58.b58decode(data)
            else:
                raw = base64.b64decode(data, validate=True)
        except ValueError as e:
            raise DataShapeError(f"Could not decode instruction data ({encoding}): {e}") from e
    elif isinstance(data, (bytes, bytearray)):
        raw = bytes(data)
    elif isinstance(data, (list, tuple)) and all(isinstance(b, int) for b in data):
        raw = bytes(b & 0xFF for b in data)
    else:
        raise DataShapeError(f"Unsupported instruction data type: {type(data).__name__}")
    if not raw:
        raise DataShapeError("Empty instruction data")
    return raw[0]


def structured_payload(instruction: dict[str, Any]) -> dict[str, Any] | None:
    """Pre-decoded instruction object (`parsed`, or `data` given as an object)."""
    parsed = instruction.get("parsed")
    if isinstance(parsed, dict):
        return parsed
    data = instruction.get("data")
    if isinstance(data, dict):
        return data
    return None


def governance_invoked(tx: dict[str, Any], ctx: ClassifierContext) -> bool:
    """Governance program appears as any instruction's program or in an invoke log."""
    keys = get_account_keys(tx)
    for ix in top_level_instructions(tx) + inner_instructions(tx):
        if get_program_id(ix, keys) == ctx.governance_program_id:
            return True
    marker = f"Program {ctx.governance_program_id} invoke"
    return any(marker in line for line in get_log_messages(tx))


# --- per-instruction matchers ------------------------------------------------

def _discriminator_category(
    ix: dict[str, Any], keys: list[str], ctx: ClassifierContext
) -> ActionCategory | None:
    program = get_program_id(ix, keys)
    if program not in ctx.programs:
        return None
    data = ix.get("data")
    if data is None or isinstance(data, dict):
        return None
    try:
        disc = decode_discriminator(data, ctx.data_encoding)
    except DataShapeError as e:
        logger.debug("instruction_data_undecodable", program=short(program), error=str(e))
        return None
    if program == ctx.chat_program_id:
        return CHAT_DISCRIMINATOR_CATEGORIES.get(disc, ActionCategory.COMMENT)
    return DISCRIMINATOR_CATEGORIES.get(disc, ActionCategory.OTHER_GOVERNANCE)


def _parsed_shape_category(
    ix: dict[str, Any], keys: list[str], ctx: ClassifierContext
) -> ActionCategory | None:
    program = get_program_id(ix, keys)
    if program not in ctx.programs:
        return None
    payload = structured_payload(ix)
    if payload is None:
        return None
    if program == ctx.chat_program_id:
        return ActionCategory.COMMENT
    kind = payload.get("type")
    if isinstance(kind, str):
        category = category_for_parsed_key(kind)
        if category is not None:
            return category
    return category_for_parsed_payload(payload) or ActionCategory.OTHER_GOVERNANCE


InstructionMatcher = Callable[[dict[str, Any], list[str], ClassifierContext], "ActionCategory | None"]


def _first_match(
    matcher: InstructionMatcher,
    instructions: Iterable[dict[str, Any]],
    keys: list[str],
    ctx: ClassifierContext,
) -> ActionCategory | None:
    for ix in instructions:
        category = matcher(ix, keys, ctx)
        if category is not None:
            return category
    return None


# --- tiers -------------------------------------------------------------------

def classify_by_logs(tx: dict[str, Any], ctx: ClassifierContext) -> ActionCategory | None:
    """Tier 1: instruction name logged by the governance program, or a chat invoke."""
    logs = get_log_messages(tx)
    for line in logs:
        match = GOVERNANCE_LOG_RE.search(line)
        if not match:
            continue
        category = category_for_instruction_name(match.group(1))
        if category is ActionCategory.OTHER_GOVERNANCE and not governance_invoked(tx, ctx):
            continue
        return category
    for line in logs:
        if ctx.chat_program_id in line and "invoke" in line:
            return ActionCategory.COMMENT
    return None


def classify_by_discriminator(tx: dict[str, Any], ctx: ClassifierContext) -> ActionCategory | None:
    """Tier 2: first byte of top-level governance/chat instruction data."""
    return _first_match(_discriminator_category, top_level_instructions(tx), get_account_keys(tx), ctx)


def classify_by_parsed_shape(tx: dict[str, Any], ctx: ClassifierContext) -> ActionCategory | None:
    """Tier 3: field names of top-level parsed instruction objects."""
    return _first_match(_parsed_shape_category, top_level_instructions(tx), get_account_keys(tx), ctx)


def classify_inner_instructions(tx: dict[str, Any], ctx: ClassifierContext) -> ActionCategory | None:
    """Tier 4: tiers 2 and 3 over CPI instructions."""
    inner = inner_instructions(tx)
    if not inner:
        return None
    keys = get_account_keys(tx)
    return (
        _first_match(_discriminator_category, inner, keys, ctx)
        or _first_match(_parsed_shape_category, inner, keys, ctx)
    )


def classify_by_invocation(tx: dict[str, Any], ctx: ClassifierContext) -> ActionCategory | None:
    """Tier 5: governance program ran but nothing more specific matched."""
    if governance_invoked(tx, ctx):
        return ActionCategory.OTHER_GOVERNANCE
    return None


ClassifierTier = Callable[[dict[str, Any], ClassifierContext], "ActionCategory | None"]

CLASSIFIER_TIERS: tuple[ClassifierTier, ...] = (
    classify_by_logs,
    classify_by_discriminator,
    classify_by_parsed_shape,
    classify_inner_instructions,
    classify_by_invocation,
)


class TransactionClassifier:
    """
    Assigns an ActionCategory to raw transactions and builds
    ClassifiedTransaction records for those the tracked wallet paid for.
    """

    def __init__(
        self,
        governance_program_id: str = GOVERNANCE_PROGRAM_ID,
        chat_program_id: str = GOVERNANCE_CHAT_PROGRAM_ID,
        *,
        data_encoding: str = ENCODING_BASE64,
        tiers: tuple[ClassifierTier, ...] = CLASSIFIER_TIERS,
    ) -> None:
        if data_encoding not in (ENCODING_BASE64, ENCODING_BASE58):
            raise ValueError(f"Unsupported data_encoding: {data_encoding}")
        self._ctx = ClassifierContext(governance_program_id, chat_program_id, data_encoding)
        self._tiers = tiers

    @property
    def context(self) -> ClassifierContext:
        return self._ctx

    def classify(self, tx: dict[str, Any]) -> ActionCategory | None:
        """Category from the first matching tier, or None if not governance-related."""
        for tier in self._tiers:
            category = tier(tx, self._ctx)
            if category is not None:
                return category
        return None

    def evaluate(
        self,
        signature: str,
        tx: dict[str, Any] | None,
        wallet_address: str,
        block_time: int,
    ) -> ClassifiedTransaction | None:
        """
        Classify and cost one transaction for the tracked wallet.

        Returns None when the transaction is missing, not governance-related,
        not paid for by the wallet, or too malformed to cost.
        """
        if not tx or get_meta(tx) is None:
            return None
        category = self.classify(tx)
        if category is None:
            return None
        if get_fee_payer(tx) != wallet_address:
            logger.debug(
                "transaction_not_fee_payer",
                signature=short(signature),
                category=category.value,
            )
            return None
        try:
            cost = calculate_cost(tx, wallet_address)
        except DataShapeError as e:
            logger.warning("transaction_cost_unavailable", signature=short(signature), error=str(e))
            return None
        slot = tx.get("slot")
        return ClassifiedTransaction(
            signature=signature,
            block_time=block_time,
            slot=int(slot) if isinstance(slot, int) else 0,
            category=category,
            network_fee=cost.network_fee,
            rent_deposit=cost.rent_deposit,
        )
