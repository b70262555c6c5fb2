"""
Connect Vida - Auth API
Identidade vem do token do provedor de autenticação; aqui mapeamos para o membro
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from connect_vida.database import get_db
from connect_vida.models import Member, MemberRole, MemberStatus, Church
from connect_vida.core import verify_access_token
from connect_vida.core.permissions import effective_permissions, has_permission, AVAILABLE_PERMISSIONS

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])
security = HTTPBearer(auto_error=False)


async def get_token_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> dict:
    """Dependency: claims de um token válido"""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token de acesso ausente"
        )

    payload = verify_access_token(credentials.credentials)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token inválido ou expirado"
        )
    return payload


async def get_current_member(
    claims: dict = Depends(get_token_claims),
    db: AsyncSession = Depends(get_db)
) -> Member:
    """Dependency para obter o membro autenticado"""
    result = await db.execute(
        select(Member).where(Member.id == claims["sub"])
    )
    member = result.scalar_one_or_none()

    if not member:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Membro não encontrado"
        )

    return member


async def get_active_member(member: Member = Depends(get_current_member)) -> Member:
    """Dependency: membro autenticado com cadastro ativo"""
    if member.status != MemberStatus.ACTIVE.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Cadastro aguardando aprovação ou inativo"
        )
    return member


def require_permission(permission_id: str):
    """Factory de dependency: exige a permissão informada"""
    async def dependency(member: Member = Depends(get_active_member)) -> Member:
        if not has_permission(member, permission_id):
            logger.warning(f"Membro {member.id} sem permissão {permission_id}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Acesso não permitido"
            )
        return member
    return dependency


async def require_master_admin(member: Member = Depends(get_active_member)) -> Member:
    """Dependency: apenas super_admin"""
    if member.role != MemberRole.SUPER_ADMIN.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Acesso restrito ao administrador master"
        )
    return member


@router.get("/me")
async def get_me(
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_db)
):
    """Perfil do membro autenticado com permissões efetivas"""
    church = await db.get(Church, member.church_id)
    return {
        **member.to_dict(),
        "church_name": church.name if church else None,
        "effective_permissions": effective_permissions(member),
    }


@router.get("/permissions")
async def list_permissions(member: Member = Depends(get_current_member)):
    """Catálogo de permissões disponíveis"""
    return [{"id": p.value, "label": label} for p, label in AVAILABLE_PERMISSIONS]
