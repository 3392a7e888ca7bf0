"""
Shared fixtures for the security agent tests.
"""

import os
import sys
from typing import List, Optional, Union

import pytest

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from securityagent.backends.base import GenerativeBackend


class FakeBackend(GenerativeBackend):
    """Backend double returning scripted replies in order."""

    name = "fake"

    def __init__(self, replies: Optional[List[Union[str, None, Exception]]] = None):
        self.replies = list(replies or [])
        self.prompts: List[str] = []
        self.closed = False

    def submit(self, prompt: str) -> Optional[str]:
        self.prompts.append(prompt)
        reply = self.replies.pop(0) if self.replies else None
        if isinstance(reply, Exception):
            raise reply
        return reply

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_backend():
    """Factory for scripted backends."""
    return FakeBackend


@pytest.fixture
def write_file(tmp_path):
    """Write a file under tmp_path and return its path."""
    def _write(rel_path: str, content: str):
        path = tmp_path / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path
    return _write
