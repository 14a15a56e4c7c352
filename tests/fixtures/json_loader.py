import copy
import json
from pathlib import Path
from typing import Any, Dict


class TestDataLoader:
    """Read-only access to tests/fixtures/test_data.json; callers get deep copies"""

    __test__ = False
    _data: Dict[str, Any] = None

    @classmethod
    def load(cls) -> Dict[str, Any]:
        if cls._data is None:
            with open(Path(__file__).parent / "test_data.json") as f:
                cls._data = json.load(f)
        return cls._data

    @classmethod
    def get(cls, key: str) -> Any:
        return copy.deepcopy(cls.load().get(key))

    @classmethod
    def user(cls, name: str) -> Dict[str, str]:
        """Registration payload for a named fixture user"""
        return cls.get("users")[name]

    @classmethod
    def user_agent(cls, device: str) -> str:
        return cls.load()["user_agents"][device]

    @classmethod
    def revocation_reason(cls, kind: str) -> str:
        return cls.load()["revocation_reasons"][kind]
