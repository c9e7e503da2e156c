"""
Module définissant les dépendances FastAPI pour l'authentification.

Fournit des dépendances pour:
- Le service d'authentification (AuthService)
- L'obtention de l'utilisateur courant à partir du token JWT
- La vérification des rôles (personnel: ADMIN/ASSISTANT, administrateur: ADMIN)
"""
import logging
from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from fastcrud import FastCRUD
from sqlalchemy.ext.asyncio import AsyncSession

from cleanops.auth.config import OAUTH2_TOKEN_URL
from cleanops.auth.exceptions import (
    InactiveUserException,
    PermissionDeniedException,
    TokenInvalidException,
    TokenMissingException,
)
from cleanops.auth.service import AuthService
from cleanops.database import get_db_session
from cleanops.users.models import STAFF_ROLES, User, UserRead, UserRole

logger = logging.getLogger(__name__)

# --- Dépendances OAuth2 ---
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=OAUTH2_TOKEN_URL, auto_error=False)

# --- Dépendances de session DB ---
DbSessionDep = Annotated[AsyncSession, Depends(get_db_session)]

def get_auth_service(db: DbSessionDep) -> AuthService:
    """Fournit une instance du service d'authentification."""
    return AuthService(user_crud=FastCRUD(User), db=db)

async def get_current_user(
    token: Annotated[Optional[str], Depends(oauth2_scheme)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)]
) -> UserRead:
    """
    Vérifie le token JWT et retourne l'utilisateur courant.

    Raises:
        TokenMissingException: Si le token est manquant
        TokenInvalidException: Si le token est invalide ou l'utilisateur inconnu
        InactiveUserException: Si le compte est désactivé
    """
    if token is None:
        logger.warning("Token manquant dans la requête.")
        raise TokenMissingException()

    user = await auth_service.get_user_from_token(token)
    if user is None:
        raise TokenInvalidException()

    if not user.is_active:
        logger.warning(f"Tentative d'accès par un utilisateur inactif: ID {user.id}")
        raise InactiveUserException()
    return user

async def get_current_staff_user(
    current_user: Annotated[UserRead, Depends(get_current_user)]
) -> UserRead:
    """Autorise les rôles ADMIN et ASSISTANT."""
    if current_user.role not in STAFF_ROLES:
        logger.warning(f"Accès refusé au personnel pour l'utilisateur ID {current_user.id} (rôle {current_user.role})")
        raise PermissionDeniedException()
    return current_user

async def get_current_admin_user(
    current_user: Annotated[UserRead, Depends(get_current_user)]
) -> UserRead:
    """Autorise uniquement le rôle ADMIN."""
    if current_user.role != UserRole.ADMIN:
        logger.warning(f"Tentative d'accès à une ressource admin par un utilisateur non-admin: ID {current_user.id}")
        raise PermissionDeniedException()
    return current_user

CurrentUserDep = Annotated[UserRead, Depends(get_current_user)]
StaffUserDep = Annotated[UserRead, Depends(get_current_staff_user)]
AdminUserDep = Annotated[UserRead, Depends(get_current_admin_user)]
