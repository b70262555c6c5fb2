"""
Connect Vida - Atualizações parciais
Aplica os campos enviados (PUT parcial) em um model SQLAlchemy
"""
from typing import Iterable, Optional

from fastapi import HTTPException, status


def null_required_fields(instance, changes: dict) -> list:
    """Campos enviados como null cuja coluna é NOT NULL"""
    columns = instance.__table__.columns
    return [
        field for field, value in changes.items()
        if value is None and field in columns and not columns[field].nullable
    ]


def apply_changes(instance, changes: dict, fields: Optional[Iterable[str]] = None) -> dict:
    """
    Copia `changes` para o model. Null em coluna obrigatória vira 400
    em vez de estourar no commit.
    """
    if fields is not None:
        changes = {k: v for k, v in changes.items() if k in fields}

    rejected = null_required_fields(instance, changes)
    if rejected:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Campos obrigatórios não podem ser nulos: {', '.join(rejected)}"
        )

    for field, value in changes.items():
        setattr(instance, field, value)
    return changes
