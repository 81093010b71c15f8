# Remote ticket stores
from app.services.stores.base import (
    RemoteTicketStore, RemoteTicket, ConditionalUpdateResult, EventCheckInCounts
)
from app.services.stores.postgres import PostgresTicketStore
