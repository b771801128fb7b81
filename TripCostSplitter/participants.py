"""
Participants Module

This module models the people and families that share a trip's costs and
resolves which balance-holding entity a participant maps to.

Features:
    - Participant and Family records
    - Entity resolution per tracking mode (individual or family)
    - Standalone-participant detection for mixed distributions

Data Model:
    Participant:
        - id: string
        - name: string
        - is_adult: bool
        - family_id: string or None

    Family:
        - id: string
        - family_name: string
        - adults: int
        - children: int

Functions:
    build_participant_map: Index participants by id.
    build_family_map: Index families by id.
    resolve_entity_id: Map a participant id to its balance entity.
    standalone_participant_ids: Drop participants already covered by a family.
"""

from typing import Iterable, Optional


class Participant:
    """
    Represents a participant in a trip.

    Attributes:
        id (str): Unique identifier for the participant.
        name (str): Name of the participant.
        is_adult (bool): Whether the participant is an adult.
        family_id (str | None): Family the participant belongs to, if any.
    """

    def __init__(
        self,
        id: str,
        name: str,
        is_adult: bool = True,
        family_id: Optional[str] = None
    ):
        self.id = id
        self.name = name
        self.is_adult = is_adult
        self.family_id = family_id

    def to_dict(self) -> dict:
        """Convert participant to a plain dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "is_adult": self.is_adult,
            "family_id": self.family_id
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Participant":
        """Create a Participant instance from a dictionary."""
        return cls(
            id=data.get("id"),
            name=data.get("name"),
            is_adult=data.get("is_adult", True),
            family_id=data.get("family_id")
        )

    def __repr__(self) -> str:
        return f"Participant(id='{self.id}', name='{self.name}', family={self.family_id})"


class Family:
    """
    Represents a family travelling together and sharing one balance.

    Attributes:
        id (str): Unique identifier for the family.
        family_name (str): Display name.
        adults (int): Number of adults.
        children (int): Number of children.
    """

    def __init__(self, id: str, family_name: str, adults: int = 0, children: int = 0):
        self.id = id
        self.family_name = family_name
        self.adults = adults
        self.children = children

    @property
    def size(self) -> int:
        """Head-count of the family."""
        return self.adults + self.children

    def to_dict(self) -> dict:
        """Convert family to a plain dictionary."""
        return {
            "id": self.id,
            "family_name": self.family_name,
            "adults": self.adults,
            "children": self.children
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Family":
        """Create a Family instance from a dictionary."""
        return cls(
            id=data.get("id"),
            family_name=data.get("family_name"),
            adults=data.get("adults", 0),
            children=data.get("children", 0)
        )

    def __repr__(self) -> str:
        return f"Family(id='{self.id}', name='{self.family_name}', size={self.size})"


def build_participant_map(participants: Iterable[Participant]) -> dict[str, Participant]:
    """Index participants by id."""
    return {p.id: p for p in participants}


def build_family_map(families: Iterable[Family]) -> dict[str, Family]:
    """Index families by id."""
    return {f.id: f for f in families}


def resolve_entity_id(
    participant_id: str,
    participant_map: dict[str, Participant],
    tracking_mode: str
) -> Optional[str]:
    """
    Resolve the balance entity a participant belongs to.

    In families mode a participant with a family collapses into that family;
    everyone else (and everyone in individuals mode) is their own entity.

    Args:
        participant_id: ID of the participant.
        participant_map: Dict mapping participant id to Participant.
        tracking_mode: "individuals" or "families".

    Returns:
        str | None: Entity id, or None if the participant is unknown.
    """
    participant = participant_map.get(participant_id)
    if participant is None:
        return None

    if tracking_mode == "families" and participant.family_id:
        return participant.family_id

    return participant.id


def standalone_participant_ids(
    participant_ids: Iterable[str],
    family_ids: Iterable[str],
    participant_map: dict[str, Participant]
) -> list[str]:
    """
    Keep only participants not already covered by one of the listed families.

    Unknown participant ids are kept here; callers decide whether to skip them.
    Order and duplicates of the input are preserved.
    """
    listed_families = set(family_ids)
    standalone = []
    for participant_id in participant_ids:
        participant = participant_map.get(participant_id)
        if participant is not None and participant.family_id in listed_families:
            continue
        standalone.append(participant_id)
    return standalone
