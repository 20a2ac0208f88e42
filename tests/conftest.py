"""Test setup for dskclient."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from dskclient.schemas import Node  # noqa: E402


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for pytest.

    This allows running integration tests selectively:
        pytest -m integration       # run only integration tests
        pytest -m "not integration" # skip integration tests
    """
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (need a running DSK backend)",
    )


@pytest.fixture
def tree_payload() -> dict:
    """A small design definitions tree as sent by the backend."""
    return {
        "url": "",
        "title": "Design System",
        "children": [
            {
                "url": "colors",
                "title": "Colors",
                "children": [
                    {"url": "colors/primary", "title": "Primary", "children": []},
                    {"url": "colors/secondary", "title": "Secondary", "children": []},
                ],
            },
            {
                "url": "components",
                "title": "Components",
                "children": [
                    {
                        "url": "components/button",
                        "title": "Button",
                        "children": [
                            {"url": "components/button/icon", "title": "Icon Button", "children": []},
                        ],
                    },
                    {"url": "components/input", "title": "Input", "children": []},
                ],
            },
            {"url": "voice", "title": "Voice and Tone", "children": []},
        ],
    }


@pytest.fixture
def tree(tree_payload: dict) -> Node:
    return Node.model_validate(tree_payload)
