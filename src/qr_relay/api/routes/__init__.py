"""qr-relay routes.

Endpoints:
    Both variants:
        POST /upload_qr  - Accept a payload from the uploading client
        GET  /           - Viewer page
        GET  /healthz    - Liveness probe (always returns ok)
        GET  /readyz     - Readiness probe (store ping / broadcaster state)

    Poll variant:
        GET  /qr_data    - Latest payload and the last five updates

    Push variant:
        GET  /events     - Server-sent event stream of new payloads
"""

from __future__ import annotations

from .display import build_router as build_display_router
from .events import build_router as build_events_router
from .health import build_router as build_health_router
from .qr_data import build_router as build_qr_data_router
from .upload import build_router as build_upload_router

__all__ = [
    "build_display_router",
    "build_events_router",
    "build_health_router",
    "build_qr_data_router",
    "build_upload_router",
]
