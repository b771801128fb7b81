"""
Allocation Module

This module works out how much of a single expense each balance entity owes.

Features:
    - Individuals, families and mixed distributions
    - Equal, percentage and custom-amount split modes
    - Head-count weighting for families (accountForFamilySize)
    - Family-member dedup for mixed distributions
    - Re-keying of participant shares onto families in families mode

Data Model:
    Input - expense: Expense with amount and distribution
    Input - participants: list of Participant
    Input - families: list of Family
    Input - tracking_mode: "individuals" or "families"

    Output - dict keyed by entity id (participant or family id):
        - share: Decimal in the expense's own currency

Rules:
    - Equal mode: shares always sum to the expense amount.
    - Percentage/amount mode: splits are trusted as given, never re-normalized.
    - Unknown participant/family ids are skipped; no entry is created.

Functions:
    calculate_expense_shares: Split one expense into per-entity shares.
"""

import logging
from decimal import Decimal
from typing import Optional

from currency import to_decimal
from expenses import (
    Expense,
    FamiliesDistribution,
    IndividualsDistribution,
    MixedDistribution,
)
from participants import (
    Family,
    Participant,
    build_family_map,
    build_participant_map,
    resolve_entity_id,
    standalone_participant_ids,
)

logger = logging.getLogger(__name__)


def _skip(warnings: Optional[list], message: str) -> None:
    logger.debug(message)
    if warnings is not None:
        warnings.append(message)


def _add_share(shares: dict, entity_id: str, value: Decimal) -> None:
    shares[entity_id] = shares.get(entity_id, Decimal("0")) + value


def _split_value(amount: Decimal, value, split_mode: str) -> Decimal:
    if split_mode == "percentage":
        return amount * to_decimal(value) / Decimal("100")
    return to_decimal(value)


def _known_participants(ids, participant_map, expense_id, warnings) -> list[str]:
    known = []
    for participant_id in ids:
        if participant_id not in participant_map:
            _skip(warnings, f"Expense {expense_id}: unknown participant '{participant_id}' skipped")
            continue
        known.append(participant_id)
    return known


def _known_families(ids, family_map, expense_id, warnings) -> list[Family]:
    known = []
    for family_id in ids:
        family = family_map.get(family_id)
        if family is None:
            _skip(warnings, f"Expense {expense_id}: unknown family '{family_id}' skipped")
            continue
        known.append(family)
    return known


def _allocate_participant_splits(
    shares, amount, splits, split_mode, allowed, participant_map, tracking_mode, expense_id, warnings
) -> None:
    for split in splits:
        if split.participant_id not in participant_map:
            _skip(warnings, f"Expense {expense_id}: unknown participant '{split.participant_id}' skipped")
            continue
        if allowed is not None and split.participant_id not in allowed:
            _skip(
                warnings,
                f"Expense {expense_id}: participant '{split.participant_id}' is covered by a listed family"
            )
            continue
        entity_id = resolve_entity_id(split.participant_id, participant_map, tracking_mode)
        _add_share(shares, entity_id, _split_value(amount, split.value, split_mode))


def _allocate_family_splits(shares, amount, splits, split_mode, family_map, expense_id, warnings) -> None:
    for split in splits:
        if split.family_id not in family_map:
            _skip(warnings, f"Expense {expense_id}: unknown family '{split.family_id}' skipped")
            continue
        _add_share(shares, split.family_id, _split_value(amount, split.value, split_mode))


def _allocate_individuals(
    shares, amount, distribution: IndividualsDistribution, participant_map, tracking_mode, expense_id, warnings
) -> None:
    if distribution.split_mode == "equal":
        known = _known_participants(distribution.participants, participant_map, expense_id, warnings)
        if not known:
            return
        share = amount / Decimal(len(known))
        for participant_id in known:
            _add_share(shares, resolve_entity_id(participant_id, participant_map, tracking_mode), share)
        return

    _allocate_participant_splits(
        shares, amount, distribution.participant_splits, distribution.split_mode,
        None, participant_map, tracking_mode, expense_id, warnings
    )


def _allocate_families(
    shares, amount, distribution: FamiliesDistribution, family_map, expense_id, warnings
) -> None:
    if distribution.split_mode != "equal":
        _allocate_family_splits(
            shares, amount, distribution.family_splits, distribution.split_mode,
            family_map, expense_id, warnings
        )
        return

    known = _known_families(distribution.families, family_map, expense_id, warnings)
    if not known:
        return

    total_people = sum(family.size for family in known)
    if distribution.account_for_family_size and total_people > 0:
        per_person = amount / Decimal(total_people)
        for family in known:
            _add_share(shares, family.id, per_person * Decimal(family.size))
        return

    # Families as equal-weight units (also used when no family has members).
    share = amount / Decimal(len(known))
    for family in known:
        _add_share(shares, family.id, share)


def _allocate_mixed(
    shares, amount, distribution: MixedDistribution, participant_map, family_map,
    tracking_mode, expense_id, warnings
) -> None:
    standalone = standalone_participant_ids(distribution.participants, distribution.families, participant_map)
    for participant_id in distribution.participants:
        if participant_id not in standalone:
            _skip(warnings, f"Expense {expense_id}: participant '{participant_id}' is covered by a listed family")

    if distribution.split_mode != "equal":
        _allocate_family_splits(
            shares, amount, distribution.family_splits, distribution.split_mode,
            family_map, expense_id, warnings
        )
        _allocate_participant_splits(
            shares, amount, distribution.participant_splits, distribution.split_mode,
            set(standalone), participant_map, tracking_mode, expense_id, warnings
        )
        return

    known_families = _known_families(distribution.families, family_map, expense_id, warnings)
    known_people = _known_participants(standalone, participant_map, expense_id, warnings)

    head_count = len(known_people) + sum(family.size for family in known_families)
    if head_count == 0:
        return

    per_person = amount / Decimal(head_count)
    for family in known_families:
        _add_share(shares, family.id, per_person * Decimal(family.size))
    for participant_id in known_people:
        _add_share(shares, resolve_entity_id(participant_id, participant_map, tracking_mode), per_person)


def calculate_expense_shares(
    expense: Expense,
    participants: list[Participant],
    families: list[Family],
    tracking_mode: str,
    warnings: Optional[list] = None
) -> dict[str, Decimal]:
    """
    Calculate how much each entity owes for one expense.

    Args:
        expense: The expense to split.
        participants: All participants of the trip.
        families: All families of the trip.
        tracking_mode: "individuals" or "families". In families mode shares of
            participants who belong to a family are re-keyed onto the family.
        warnings: Optional list collecting a message for every skipped id.

    Returns:
        dict: Entity id -> Decimal share in the expense's own currency.

    Notes:
        - Mixed distributions never give a standalone share to a member of a
          family listed in the same distribution
        - Does NOT convert currencies and does NOT mutate its inputs
    """
    participant_map = build_participant_map(participants)
    family_map = build_family_map(families)
    amount = to_decimal(expense.amount)
    distribution = expense.distribution
    shares: dict[str, Decimal] = {}

    if isinstance(distribution, IndividualsDistribution):
        _allocate_individuals(
            shares, amount, distribution, participant_map, tracking_mode, expense.id, warnings
        )
    elif isinstance(distribution, FamiliesDistribution):
        _allocate_families(shares, amount, distribution, family_map, expense.id, warnings)
    elif isinstance(distribution, MixedDistribution):
        _allocate_mixed(
            shares, amount, distribution, participant_map, family_map,
            tracking_mode, expense.id, warnings
        )
    else:
        raise TypeError(f"Unsupported distribution: {distribution!r}")

    return shares
