"""
Connect Vida - Relógio
Colunas DateTime são gravadas em UTC sem tzinfo
"""
from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)
