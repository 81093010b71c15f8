import logging
from datetime import datetime
from typing import List, Optional, Union

import asyncpg

from app.database import get_db_connection
from app.core.exceptions import RemoteStoreError
from app.services.stores.base import (
    RemoteTicketStore, RemoteTicket, ConditionalUpdateResult, EventCheckInCounts
)

logger = logging.getLogger(__name__)

_DB_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)

_TICKET_COLUMNS = """
    t.id, t.ticket_code, t.status, t.checked_in_at, t.event_id,
    p.name as participant_name, tc.name as category_name
"""

_TICKET_JOINS = """
    FROM tickets t
    LEFT JOIN participants p ON t.participant_id = p.id
    LEFT JOIN ticket_categories tc ON t.ticket_category_id = tc.id
"""


def _row_to_ticket(row) -> RemoteTicket:
    return RemoteTicket(
        id=str(row['id']),
        ticket_code=row['ticket_code'],
        status=row['status'],
        event_id=str(row['event_id']),
        checked_in_at=row['checked_in_at'],
        participant_name=row['participant_name'],
        category_name=row['category_name']
    )


def _as_datetime(value: Union[str, datetime]) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value.replace('Z', '+00:00'))


class PostgresTicketStore(RemoteTicketStore):
    """Remote ticket store backed by the shared asyncpg pool"""

    async def fetch_tickets_for_event(self, event_id: str) -> List[RemoteTicket]:
        try:
            async with get_db_connection(use_transaction=False) as conn:
                rows = await conn.fetch(f"""
                    SELECT {_TICKET_COLUMNS}
                    {_TICKET_JOINS}
                    WHERE t.event_id = $1
                    ORDER BY t.created_at, t.id
                """, event_id)
        except _DB_ERRORS as e:
            logger.error(f"Failed to fetch tickets for event {event_id}: {e}")
            raise RemoteStoreError("Failed to fetch tickets", {"event_id": event_id})

        return [_row_to_ticket(row) for row in rows]

    async def conditional_update_ticket_status(
        self,
        ticket_id: str,
        new_status: str,
        checked_in_at: Union[str, datetime],
        expected_current_status: str
    ) -> ConditionalUpdateResult:
        try:
            async with get_db_connection() as conn:
                result = await conn.execute("""
                    UPDATE tickets
                    SET status = $1, checked_in_at = $2
                    WHERE id = $3 AND status = $4
                """, new_status, _as_datetime(checked_in_at), ticket_id, expected_current_status)
        except _DB_ERRORS as e:
            logger.error(f"Failed to update ticket {ticket_id}: {e}")
            raise RemoteStoreError("Failed to update ticket", {"ticket_id": ticket_id})

        # asyncpg returns a status tag like "UPDATE 1"
        if result == "UPDATE 1":
            return ConditionalUpdateResult.APPLIED
        return ConditionalUpdateResult.NO_MATCH

    async def find_ticket_by_code(self, ticket_code: str) -> Optional[RemoteTicket]:
        try:
            async with get_db_connection(use_transaction=False) as conn:
                row = await conn.fetchrow(f"""
                    SELECT {_TICKET_COLUMNS}
                    {_TICKET_JOINS}
                    WHERE lower(t.ticket_code) = lower($1)
                    LIMIT 1
                """, ticket_code)
        except _DB_ERRORS as e:
            logger.error(f"Failed to look up ticket {ticket_code}: {e}")
            raise RemoteStoreError("Failed to look up ticket", {"ticket_code": ticket_code})

        return _row_to_ticket(row) if row else None

    async def count_check_ins(self, event_id: str) -> EventCheckInCounts:
        try:
            async with get_db_connection(use_transaction=False) as conn:
                stats = await conn.fetchrow("""
                    SELECT
                        COUNT(*) as total_tickets,
                        COUNT(*) FILTER (WHERE t.status = 'used') as checked_in
                    FROM tickets t
                    WHERE t.event_id = $1
                """, event_id)
        except _DB_ERRORS as e:
            logger.error(f"Failed to count check-ins for event {event_id}: {e}")
            raise RemoteStoreError("Failed to load check-in stats", {"event_id": event_id})

        return EventCheckInCounts(
            total_tickets=(stats['total_tickets'] if stats else 0) or 0,
            checked_in=(stats['checked_in'] if stats else 0) or 0
        )
