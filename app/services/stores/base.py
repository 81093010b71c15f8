"""
Base Remote Ticket Store Interface

The remote relational store holds the authoritative ticket status.
The offline cache only reads whole events from it and writes check-ins
back through a conditional update.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, List, Union
from datetime import datetime
from enum import Enum


class ConditionalUpdateResult(str, Enum):
    """Outcome of a guarded status write"""
    APPLIED = "applied"
    NO_MATCH = "no_match"


@dataclass
class RemoteTicket:
    """Ticket row joined with participant and category names"""
    id: str
    ticket_code: str
    status: str
    event_id: str
    checked_in_at: Optional[datetime] = None
    participant_name: Optional[str] = None
    category_name: Optional[str] = None


@dataclass
class EventCheckInCounts:
    total_tickets: int
    checked_in: int


class RemoteTicketStore(ABC):
    """
    Abstract base class for the remote ticket store.

    Implementations raise RemoteStoreError when the store cannot be reached
    or the query fails.
    """

    @abstractmethod
    async def fetch_tickets_for_event(self, event_id: str) -> List[RemoteTicket]:
        """
        Fetch every ticket of an event.

        Args:
            event_id: Event identifier

        Returns:
            Tickets in a stable order
        """
        pass

    @abstractmethod
    async def conditional_update_ticket_status(
        self,
        ticket_id: str,
        new_status: str,
        checked_in_at: Union[str, datetime],
        expected_current_status: str
    ) -> ConditionalUpdateResult:
        """
        Set status and check-in time only if the ticket's current status
        equals expected_current_status.

        Returns:
            APPLIED if a row was written, NO_MATCH otherwise
        """
        pass

    @abstractmethod
    async def find_ticket_by_code(self, ticket_code: str) -> Optional[RemoteTicket]:
        """Look up a single ticket by code (case-insensitive)"""
        pass

    @abstractmethod
    async def count_check_ins(self, event_id: str) -> EventCheckInCounts:
        """Total and checked-in ticket counts for an event"""
        pass
