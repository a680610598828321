"""Shared fixtures for node_schema tests."""

from datetime import datetime, timezone

import pytest

from node_schema.context import InferenceContext, SiteConfig

FIXED_NOW = datetime(2020, 1, 10, tzinfo=timezone.utc)


@pytest.fixture
def make_context():
    """Return a factory building a context over the given records."""

    def _make(nodes=(), mapping=None):
        return InferenceContext.from_nodes(
            nodes,
            config=SiteConfig(mapping=dict(mapping or {})),
            clock=lambda: FIXED_NOW,
        )

    return _make


@pytest.fixture
def file_nodes():
    """A markdown file and an image next to it."""
    return [
        {
            "id": "file-post",
            "type": "File",
            "dir": "/site/posts",
            "absolutePath": "/site/posts/hello.md",
            "extension": "md",
        },
        {
            "id": "file-cover",
            "type": "File",
            "dir": "/site/posts/images",
            "absolutePath": "/site/posts/images/cover.png",
            "extension": "png",
        },
    ]
