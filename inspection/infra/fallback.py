from __future__ import annotations

from typing import Any

from inspection.domain.models import utc_now


def fallback_payload() -> dict[str, Any]:
    """Built-in dataset used whenever the store cannot be loaded."""
    return {
        "status": "fallback",
        "sites": [
            {"id": 1, "name": "Hogenakkal", "district": "Dharmapuri", "lat": 12.1208, "lng": 77.7855},
            {"id": 2, "name": "Musiri", "district": "Trichy", "lat": 10.95, "lng": 78.44},
            {"id": 3, "name": "Kodumudi", "district": "Erode", "lat": 11.17, "lng": 77.88},
        ],
        "officers": [
            {"name": "Admin", "designation": "IT Head", "level": "ADMIN", "password": "123"},
            {"name": "Chief Engineer", "designation": "CE (SRO)", "level": "CE", "password": "123"},
            {"name": "Sup. Engineer", "designation": "SE (Trichy)", "level": "SE", "password": "123"},
            {"name": "Exec. Engineer", "designation": "EE (Trichy)", "level": "EE", "password": "123"},
            {
                "name": "SDO Trichy",
                "designation": "Sub-Div Officer",
                "level": "SDO",
                "jurisdiction": "Trichy, Hogenakkal",
                "password": "123",
            },
        ],
        "reports": [
            {
                "id": 101,
                "date": utc_now(),
                "officer": "Exec. Engineer",
                "inspectorRole": "EE",
                "site": "Musiri",
                "remarks": "Gauge post repainting needed",
                "status": "Pending Compliance",
            }
        ],
    }
