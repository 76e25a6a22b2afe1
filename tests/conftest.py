import json
from typing import Any

import pytest


class MemoryState:
    """In-memory stand-in for the runner's per-run state."""

    def __init__(self) -> None:
        self.values: dict[str, str] = {}

    def set(self, key: str, value: Any) -> None:
        self.values[key] = value if isinstance(value, str) else json.dumps(value)

    def get(self, key: str) -> str | None:
        return self.values.get(key) or None


@pytest.fixture
def state():
    return MemoryState()
