# Models module for Wichty Check-In API
from app.models.offline_checkin import (
    TicketStatus, OfflineErrorKind, OfflineTicket, LocalCheckIn,
    CheckInRequest, CheckInResult, DownloadResult, SyncSummary,
    OfflineStatus, ConnectivityState
)
from app.models.checkin import (
    ScanResultKind, ScanRequest, ScanResult, CheckInStats
)
