"""
Demo Reference Data

Reference sets loaded into the in-memory store in dev mode (no DATABASE_URL),
so rules can be built against something without a database.
"""

from netrules.catalog.models import ReferenceKind, ReferenceRecord, ReferenceSets


DEMO_REFERENCE_ROWS = {
    ReferenceKind.USER_GROUP: [
        {"id": "ug-admins", "name": "Administrators", "sort_value": 1, "colorCode": "#ef4444"},
        {"id": "ug-staff", "name": "Staff", "sort_value": 2, "colorCode": "#3b82f6"},
        {"id": "ug-guests", "name": "Guests", "sort_value": 3, "colorCode": "#a3a3a3"},
    ],
    ReferenceKind.TRAFFIC_TYPE: [
        {"id": "tt-voip", "name": "VoIP", "sort_value": 10, "category": "realtime"},
        {"id": "tt-video", "name": "Video Streaming", "sort_value": 8, "category": "streaming"},
        {"id": "tt-web", "name": "Web Browsing", "sort_value": 5, "category": "web"},
        {"id": "tt-bulk", "name": "Bulk Downloads", "sort_value": 1, "category": "bulk"},
    ],
    ReferenceKind.NETWORK_PATH: [
        {"id": "np-fiber", "name": "Primary Fiber", "sort_value": 0.99, "pathType": "wan"},
        {"id": "np-lte", "name": "LTE Backup", "sort_value": 0.9, "pathType": "cellular"},
    ],
    ReferenceKind.TUNNEL: [
        {"id": "t-fra", "name": "WireGuard Frankfurt", "sort_value": 18,
         "tunnelType": "wireguard", "status": "up"},
        {"id": "t-nyc", "name": "WireGuard New York", "sort_value": 85,
         "tunnelType": "wireguard", "status": "up"},
    ],
}


def demo_reference_sets() -> ReferenceSets:
    records = {
        kind: [ReferenceRecord(**row) for row in rows]
        for kind, rows in DEMO_REFERENCE_ROWS.items()
    }
    return ReferenceSets(
        user_groups=records[ReferenceKind.USER_GROUP],
        traffic_types=records[ReferenceKind.TRAFFIC_TYPE],
        network_paths=records[ReferenceKind.NETWORK_PATH],
        tunnels=records[ReferenceKind.TUNNEL],
    )
