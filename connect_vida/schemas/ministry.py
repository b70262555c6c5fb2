"""
Connect Vida - Ministry Schemas
"""
from pydantic import BaseModel, Field
from typing import Literal, Optional

VocationalProfile = Literal[
    "midia", "louvor", "diaconato", "integracao", "ensino", "kids", "organizacao", "acao_social"
]


class MinistryCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    description: Optional[str] = None
    leader_id: Optional[str] = None
    vocational_profile: Optional[VocationalProfile] = Field(
        None, description="Perfil do teste vocacional atendido pelo ministério"
    )


class MinistryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = None
    leader_id: Optional[str] = None
    vocational_profile: Optional[VocationalProfile] = None


class VolunteerAdd(BaseModel):
    member_id: str
    function: Optional[str] = Field(None, max_length=100)
