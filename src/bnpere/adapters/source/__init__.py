"""Savings provider clients."""

from __future__ import annotations

from bnpere.adapters.source.export_file import ExportFileSource
from bnpere.adapters.source.http import HttpSourceClient
from bnpere.adapters.source.protocol import (
    SourceAuthenticationError,
    SourceClient,
    SourceClientError,
)

__all__ = [
    "ExportFileSource",
    "HttpSourceClient",
    "SourceAuthenticationError",
    "SourceClient",
    "SourceClientError",
]
