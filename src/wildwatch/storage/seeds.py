"""Seed records served while the persistent store is unavailable."""

from __future__ import annotations

from typing import Any

SEED_DEVICES: tuple[dict[str, Any], ...] = (
    {
        "id": 1,
        "device_id": "SEN-001",
        "name": "Core Area Sector 7",
        "location": {"lat": 11.7089, "lng": 76.5731, "zone": "Core Protected Zone"},
        "status": "online",
        "battery": 85,
        "signal_strength": 90,
        "connectivity": "LoRa",
        "last_ping": "2024-01-15T14:23:45Z",
        "alerts_count": 3,
        "uptime_percentage": 99.2,
        "created_at": "2024-01-01T00:00:00Z",
        "updated_at": "2024-01-15T14:23:45Z",
    },
    {
        "id": 2,
        "device_id": "SEN-004",
        "name": "Buffer Zone Northeast",
        "location": {"lat": 11.6989, "lng": 76.5631, "zone": "Buffer Management Area"},
        "status": "online",
        "battery": 72,
        "signal_strength": 85,
        "connectivity": "GSM",
        "last_ping": "2024-01-15T14:22:12Z",
        "alerts_count": 0,
        "uptime_percentage": 95.8,
        "created_at": "2024-01-01T00:00:00Z",
        "updated_at": "2024-01-15T14:22:12Z",
    },
    {
        "id": 3,
        "device_id": "SEN-007",
        "name": "Safari Route Checkpoint",
        "location": {"lat": 11.6889, "lng": 76.5431, "zone": "Tourist Safari Zone"},
        "status": "offline",
        "battery": 15,
        "signal_strength": 0,
        "connectivity": "LoRa",
        "last_ping": "2024-01-14T09:45:33Z",
        "alerts_count": 1,
        "uptime_percentage": 67.3,
        "created_at": "2024-01-01T00:00:00Z",
        "updated_at": "2024-01-14T09:45:33Z",
    },
)

SEED_ALERTS: tuple[dict[str, Any], ...] = (
    {
        "id": 1,
        "alert_id": "ALT-001",
        "device_id": "SEN-004",
        "alert_type": "gunshot",
        "severity": "High",
        "location": {"lat": 11.7089, "lng": 76.5731, "name": "Core Area Sector 7"},
        "description": "Gunshot detected near elephant corridor",
        "audio_url": "/api/audio/gunshot-001.wav",
        "timestamp": "2024-01-15T14:23:45Z",
        "resolved": False,
        "created_at": "2024-01-15T14:23:45Z",
        "photo_url": "/placeholder.svg",
    },
    {
        "id": 2,
        "alert_id": "ALT-002",
        "device_id": "SEN-007",
        "alert_type": "chainsaw",
        "severity": "High",
        "location": {"lat": 11.6889, "lng": 76.5431, "name": "Buffer Zone Northeast"},
        "description": "Chainsaw activity detected in protected area",
        "audio_url": "/api/audio/chainsaw-002.wav",
        "timestamp": "2024-01-15T13:45:12Z",
        "resolved": False,
        "created_at": "2024-01-15T13:45:12Z",
        "photo_url": "/placeholder.svg",
    },
    {
        "id": 3,
        "alert_id": "ALT-003",
        "device_id": "SEN-001",
        "alert_type": "vehicle",
        "severity": "Medium",
        "location": {"lat": 11.7189, "lng": 76.5931, "name": "Patrol Route Delta"},
        "description": "Unauthorized vehicle movement after hours",
        "audio_url": "/api/audio/vehicle-003.wav",
        "timestamp": "2024-01-15T12:12:33Z",
        "resolved": True,
        "created_at": "2024-01-15T12:12:33Z",
        "photo_url": "/placeholder.svg",
    },
    {
        "id": 4,
        "alert_id": "ALT-004",
        "device_id": "SEN-012",
        "alert_type": "animal_distress",
        "severity": "Medium",
        "location": {"lat": 11.6989, "lng": 76.5631, "name": "Wildlife Corridor South"},
        "description": "Animal distress calls detected",
        "audio_url": "/api/audio/distress-004.wav",
        "timestamp": "2024-01-15T11:34:56Z",
        "resolved": False,
        "created_at": "2024-01-15T11:34:56Z",
        "photo_url": "/placeholder.svg",
    },
)

SEED_ANALYTICS: dict[str, Any] = {
    "weeklyAlerts": [
        {"day": "Mon", "gunshots": 2, "chainsaws": 1, "vehicles": 3, "total": 6},
        {"day": "Tue", "gunshots": 0, "chainsaws": 0, "vehicles": 1, "total": 1},
        {"day": "Wed", "gunshots": 1, "chainsaws": 2, "vehicles": 2, "total": 5},
        {"day": "Thu", "gunshots": 3, "chainsaws": 0, "vehicles": 1, "total": 4},
        {"day": "Fri", "gunshots": 1, "chainsaws": 1, "vehicles": 4, "total": 6},
        {"day": "Sat", "gunshots": 2, "chainsaws": 3, "vehicles": 2, "total": 7},
        {"day": "Sun", "gunshots": 0, "chainsaws": 1, "vehicles": 1, "total": 2},
    ],
    "monthlyTrend": [
        {"month": "Jan", "alerts": 45, "incidents": 12},
        {"month": "Feb", "alerts": 38, "incidents": 8},
        {"month": "Mar", "alerts": 52, "incidents": 15},
        {"month": "Apr", "alerts": 41, "incidents": 10},
        {"month": "May", "alerts": 47, "incidents": 13},
        {"month": "Jun", "alerts": 35, "incidents": 7},
    ],
    "alertTypes": [
        {"name": "Vehicle Movement", "value": 45, "color": "#8B5CF6"},
        {"name": "Gunshots", "value": 28, "color": "#EF4444"},
        {"name": "Chainsaw Activity", "value": 18, "color": "#F59E0B"},
        {"name": "Animal Distress", "value": 9, "color": "#10B981"},
    ],
    "summary": {
        "totalAlerts": 31,
        "avgDailyAlerts": 4.4,
        "peakDay": "Sat",
        "responseRate": 94,
        "onlineDevices": 4,
        "totalDevices": 6,
        "networkHealth": 67,
    },
}
