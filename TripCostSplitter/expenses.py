"""
Expenses Module

This module models trip expenses and the rules describing who shares them.

Features:
    - Expense records with currency and category
    - Distribution tagged union (individuals, families, mixed)
    - Equal, percentage and custom-amount split modes
    - Family-member dedup when building mixed distributions

Data Model:
    Expense:
        - id: string
        - amount: float (must be > 0)
        - currency: string (ISO code)
        - paid_by: string (participant id)
        - distribution: Distribution
        - category: one of VALID_CATEGORIES
        - expense_date: string (YYYY-MM-DD)
        - description: string
        - comment: string or None

    Distribution (discriminated on "type"):
        - individuals: participants, split_mode, participant_splits
        - families: families, account_for_family_size, split_mode, family_splits
        - mixed: families, participants, split_mode, both split lists

Percentage splits must sum to 100 and amount splits to the expense amount.
That is checked by the caller, never here.

Functions:
    parse_distribution: Validate raw distribution data into a Distribution.
    build_mixed_distribution: Build a mixed distribution without duplicates.
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

from participants import Participant, build_participant_map, standalone_participant_ids


VALID_CATEGORIES = {"Accommodation", "Food", "Activities", "Training", "Transport", "Other"}

SplitMode = Literal["equal", "percentage", "amount"]


class _WireModel(BaseModel):
    # Accepts both snake_case and the app's camelCase keys.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class ParticipantSplit(_WireModel):
    """Explicit percentage or amount for one participant."""
    participant_id: str
    value: float


class FamilySplit(_WireModel):
    """Explicit percentage or amount for one family."""
    family_id: str
    value: float


class IndividualsDistribution(_WireModel):
    """Expense shared among listed participants."""
    type: Literal["individuals"] = "individuals"
    participants: list[str] = Field(default_factory=list)
    split_mode: SplitMode = "equal"
    participant_splits: list[ParticipantSplit] = Field(default_factory=list)


class FamiliesDistribution(_WireModel):
    """Expense shared among listed families."""
    type: Literal["families"] = "families"
    families: list[str] = Field(default_factory=list)
    account_for_family_size: bool = False
    split_mode: SplitMode = "equal"
    family_splits: list[FamilySplit] = Field(default_factory=list)


class MixedDistribution(_WireModel):
    """Expense shared among some families and some standalone participants."""
    type: Literal["mixed"] = "mixed"
    families: list[str] = Field(default_factory=list)
    participants: list[str] = Field(default_factory=list)
    split_mode: SplitMode = "equal"
    participant_splits: list[ParticipantSplit] = Field(default_factory=list)
    family_splits: list[FamilySplit] = Field(default_factory=list)


Distribution = Annotated[
    Union[IndividualsDistribution, FamiliesDistribution, MixedDistribution],
    Field(discriminator="type")
]

_distribution_adapter = TypeAdapter(Distribution)


def parse_distribution(data) -> Distribution:
    """
    Validate raw distribution data into a Distribution model.

    Args:
        data: A dict (snake_case or camelCase keys) or an existing model.

    Returns:
        Distribution: The matching distribution model.

    Raises:
        pydantic.ValidationError: If the type tag or fields are invalid.
    """
    if isinstance(data, (IndividualsDistribution, FamiliesDistribution, MixedDistribution)):
        return data
    return _distribution_adapter.validate_python(data)


def build_mixed_distribution(
    family_ids: list[str],
    participant_ids: list[str],
    participants: list[Participant],
    split_mode: SplitMode = "equal",
    participant_splits: Optional[list[ParticipantSplit]] = None,
    family_splits: Optional[list[FamilySplit]] = None
) -> MixedDistribution:
    """
    Build a mixed distribution, dropping participants whose family is listed.

    A member of a listed family is already paid for through the family's
    share, so neither the participant id nor its explicit split is kept.
    """
    participant_map = build_participant_map(participants)
    standalone = standalone_participant_ids(participant_ids, family_ids, participant_map)
    kept = set(standalone)

    return MixedDistribution(
        families=list(family_ids),
        participants=standalone,
        split_mode=split_mode,
        participant_splits=[s for s in (participant_splits or []) if s.participant_id in kept],
        family_splits=list(family_splits or [])
    )


class Expense:
    """
    Represents a single expense in the trip.

    Attributes:
        id (str): Unique identifier.
        amount (float): Amount in the expense's own currency.
        currency (str): ISO currency code.
        paid_by (str): Participant ID of who paid.
        distribution (Distribution): Who shares the expense and how.
        category (str): One of VALID_CATEGORIES.
        expense_date (str): Date of expense (YYYY-MM-DD).
        description (str): Short description.
        comment (str | None): Optional free text.
    """

    def __init__(
        self,
        id: str,
        amount: float,
        currency: str,
        paid_by: str,
        distribution,
        category: str = "Other",
        expense_date: str = "",
        description: str = "",
        comment: Optional[str] = None
    ):
        self.id = id
        self.amount = amount
        self.currency = currency
        self.paid_by = paid_by
        self.distribution = parse_distribution(distribution)
        self.category = category
        self.expense_date = expense_date
        self.description = description
        self.comment = comment

    def to_dict(self) -> dict:
        """Convert expense to a plain dictionary."""
        return {
            "id": self.id,
            "amount": self.amount,
            "currency": self.currency,
            "paid_by": self.paid_by,
            "distribution": self.distribution.model_dump(),
            "category": self.category,
            "expense_date": self.expense_date,
            "description": self.description,
            "comment": self.comment
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Expense":
        """Create an Expense instance from a dictionary."""
        return cls(
            id=data.get("id"),
            amount=data.get("amount"),
            currency=data.get("currency"),
            paid_by=data.get("paid_by"),
            distribution=data.get("distribution"),
            category=data.get("category", "Other"),
            expense_date=data.get("expense_date", ""),
            description=data.get("description", ""),
            comment=data.get("comment")
        )

    def __repr__(self) -> str:
        return (
            f"Expense(id='{self.id}', paid_by='{self.paid_by}', amount={self.amount}, "
            f"currency='{self.currency}', type='{self.distribution.type}')"
        )
