# Routers module for Wichty Check-In API
from app.routers import offline_checkin
from app.routers import checkin
