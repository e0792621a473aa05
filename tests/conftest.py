"""Shared fixtures: feed frames as delivered by the P2P earthquake API."""

import pytest


@pytest.fixture
def quake_frame():
    """A code 551 frame with a full hypocenter and three observation points."""
    return {
        "code": 551,
        "id": "65a1b2c3d4e5f60718293a4b",
        "time": "2024/01/01 16:13:02.123",
        "issue": {"source": "気象庁", "time": "2024/01/01 16:13:00", "type": "DetailScale"},
        "earthquake": {
            "time": "2024/01/01 16:10:00",
            "hypocenter": {
                "name": "石川県能登地方",
                "latitude": 37.5,
                "longitude": 137.3,
                "depth": 10,
                "magnitude": 7.6,
            },
            "maxScale": 70,
            "domesticTsunami": "Warning",
            "foreignTsunami": "Unknown",
        },
        "points": [
            {"pref": "石川県", "addr": "志賀町香能", "isArea": False, "scale": 70},
            {"pref": "石川県", "addr": "七尾市田鶴浜町", "isArea": False, "scale": 60},
            {"pref": "石川県", "addr": "輪島市門前町走出", "isArea": False, "scale": 70},
        ],
    }


@pytest.fixture
def tsunami_frame():
    """A code 552 frame with two forecast areas."""
    return {
        "code": 552,
        "id": "65a1b2c3d4e5f60718293a4c",
        "time": "2024/01/01 16:22:00.000",
        "cancelled": False,
        "issue": {"source": "気象庁", "time": "2024/01/01 16:22:00", "type": "Focus"},
        "areas": [
            {"grade": "MajorWarning", "immediate": True, "name": "能登"},
            {"grade": "Watch", "immediate": False, "name": "新潟県上中下越"},
        ],
    }


@pytest.fixture
def eew_frame():
    """A code 556 frame with two predicted-impact areas."""
    return {
        "code": 556,
        "id": "65a1b2c3d4e5f60718293a4d",
        "time": "2024/01/01 16:10:12.500",
        "test": False,
        "cancelled": False,
        "issue": {"time": "2024/01/01 16:10:12", "eventId": "20240101161005", "serial": "4"},
        "earthquake": {
            "originTime": "2024/01/01 16:10:05",
            "arrivalTime": "2024/01/01 16:10:06",
            "hypocenter": {
                "name": "石川県能登地方",
                "reduceName": "石川県",
                "latitude": 37.6,
                "longitude": 137.2,
                "depth": 10,
                "magnitude": 7.4,
            },
        },
        "areas": [
            {"pref": "石川県", "name": "石川県能登", "scaleFrom": 55, "scaleTo": 70,
             "kindCode": "10", "arrivalTime": "2024/01/01 16:10:20"},
            {"pref": "新潟県", "name": "新潟県上越", "scaleFrom": 45, "scaleTo": 45,
             "kindCode": "10", "arrivalTime": None},
        ],
    }
