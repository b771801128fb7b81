"""
Payments Module

Recorded settlements: real-world payments between participants that offset
their balances outside of expense sharing.

Data Model:
    Settlement:
        - id: string
        - from_participant_id: string (who paid)
        - to_participant_id: string (who received)
        - amount: float
        - currency: string
        - settlement_date: string (YYYY-MM-DD)
        - note: string or None
"""

from typing import Optional


class Settlement:
    """
    Represents a recorded payment between two participants.

    Attributes:
        id (str): Unique identifier.
        from_participant_id (str): Participant who paid.
        to_participant_id (str): Participant who received.
        amount (float): Amount paid.
        currency (str): Currency the amount is recorded in.
        settlement_date (str): Date of payment (YYYY-MM-DD).
        note (str | None): Optional note.
    """

    def __init__(
        self,
        id: str,
        from_participant_id: str,
        to_participant_id: str,
        amount: float,
        currency: str,
        settlement_date: str = "",
        note: Optional[str] = None
    ):
        self.id = id
        self.from_participant_id = from_participant_id
        self.to_participant_id = to_participant_id
        self.amount = amount
        self.currency = currency
        self.settlement_date = settlement_date
        self.note = note

    def to_dict(self) -> dict:
        """Convert settlement to a plain dictionary."""
        return {
            "id": self.id,
            "from_participant_id": self.from_participant_id,
            "to_participant_id": self.to_participant_id,
            "amount": self.amount,
            "currency": self.currency,
            "settlement_date": self.settlement_date,
            "note": self.note
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Settlement":
        """Create a Settlement instance from a dictionary."""
        return cls(
            id=data.get("id"),
            from_participant_id=data.get("from_participant_id"),
            to_participant_id=data.get("to_participant_id"),
            amount=data.get("amount"),
            currency=data.get("currency"),
            settlement_date=data.get("settlement_date", ""),
            note=data.get("note")
        )

    def __repr__(self) -> str:
        return (
            f"Settlement(from='{self.from_participant_id}', to='{self.to_participant_id}', "
            f"amount={self.amount}, currency='{self.currency}')"
        )
