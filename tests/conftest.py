import base64

import pytest


class FakeHost:
    """In-memory host services; records render requests."""

    def __init__(self, image: bytes = b"\x89PNG fake", fail_for=()):
        self.image = image
        self.fail_for = set(fail_for)
        self.calls = []

    async def export_image(self, node_id, settings):
        self.calls.append((node_id, settings))
        if node_id in self.fail_for:
            raise RuntimeError(f"render failed for {node_id}")
        return self.image

    def base64_encode(self, data):
        return base64.b64encode(data).decode("ascii")


@pytest.fixture
def host():
    return FakeHost()


@pytest.fixture
def card_payload():
    """A vertical auto layout card holding a title and a button, selected as the button."""
    return {
        "id": "1:3",
        "name": "Button",
        "type": "FRAME",
        "x": 16,
        "y": 50,
        "width": 120,
        "height": 40,
        "rotation": 0,
        "layoutMode": "HORIZONTAL",
        "itemSpacing": 8,
        "paddingTop": 8,
        "paddingRight": 16,
        "paddingBottom": 8,
        "paddingLeft": 16,
        "fills": [{"type": "SOLID", "color": {"r": 0.2, "g": 0.4, "b": 1}}],
        "children": [
            {"id": "1:4", "name": "Label", "type": "TEXT", "x": 32, "y": 58, "width": 88, "height": 24},
        ],
        "parent": {
            "id": "1:1",
            "name": "Card",
            "type": "FRAME",
            "x": 0,
            "y": 0,
            "width": 200,
            "height": 300,
            "children": [
                {"id": "1:2", "name": "Title", "type": "TEXT", "x": 16, "y": 10, "width": 168, "height": 20},
                {"id": "1:3", "name": "Button", "type": "FRAME", "x": 16, "y": 50, "width": 120, "height": 40},
            ],
        },
    }


@pytest.fixture
def text_payload():
    return {
        "id": "2:1",
        "name": "Heading",
        "type": "TEXT",
        "x": 0,
        "y": 0,
        "width": 240,
        "height": 32,
        "fontName": {"family": "Inter", "style": "Semi Bold"},
        "fontSize": 24,
        "letterSpacing": {"unit": "PIXELS", "value": 0},
        "lineHeight": {"unit": "AUTO"},
        "textAlignHorizontal": "LEFT",
        "textCase": "ORIGINAL",
        "textDecoration": "NONE",
        "fills": [{"type": "SOLID", "color": {"r": 0, "g": 0, "b": 0}}],
    }


@pytest.fixture
def make_host():
    return FakeHost
