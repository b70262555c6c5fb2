"""
Connect Vida - Member Schemas
"""
from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List
from datetime import date


class MemberCreate(BaseModel):
    id: str = Field(..., min_length=1, max_length=36)
    full_name: str = Field(..., min_length=2, max_length=255)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=20)
    birth_date: Optional[date] = None
    address: Optional[str] = None
    ministry: Optional[str] = Field(None, max_length=100)
    role: str = "membro"
    status: str = "pendente"


class MemberUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=2, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=20)
    birth_date: Optional[date] = None
    address: Optional[str] = None
    ministry: Optional[str] = Field(None, max_length=100)


class MemberSelfUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=2, max_length=255)
    phone: Optional[str] = Field(None, max_length=20)
    birth_date: Optional[date] = None
    address: Optional[str] = None


class MemberJoinRequest(BaseModel):
    """Auto cadastro: o id e o email vêm do token"""
    church_id: str
    full_name: str = Field(..., min_length=2, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=20)
    birth_date: Optional[date] = None
    address: Optional[str] = None


class RoleUpdate(BaseModel):
    role: str


class PermissionsUpdate(BaseModel):
    # None volta para o preset do papel
    permissions: Optional[List[str]] = None
