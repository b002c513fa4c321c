# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Database backends for cached provider specifications."""

from tps.database.sqlite import SQLiteSpecCache

__all__ = ["SQLiteSpecCache"]
