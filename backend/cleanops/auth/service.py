"""
Service d'authentification pour l'API.

Contient la logique métier pour:
- L'authentification des utilisateurs (email + mot de passe)
- L'obtention de l'utilisateur courant à partir d'un token JWT
"""
import logging
from typing import Optional

from fastcrud import FastCRUD
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from cleanops.auth.security import verify_password, decode_access_token
from cleanops.core.schemas import utcnow
from cleanops.users.models import User, UserRead

logger = logging.getLogger(__name__)

class AuthService:
    """Service pour gérer l'authentification des utilisateurs avec FastCRUD."""

    def __init__(self, user_crud: FastCRUD, db: AsyncSession):
        self.user_crud = user_crud
        self.db = db

    async def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """
        Authentifie un utilisateur par email et mot de passe.
        Retourne le modèle User (table) si succès, sinon None.
        """
        logger.debug(f"[AuthService] Tentative d'authentification pour: {email}")

        result = await self.db.execute(select(User).where(User.email == email))
        user: Optional[User] = result.scalars().first()
        if user is None:
            logger.warning(f"[AuthService] Utilisateur non trouvé: {email}")
            return None

        if not verify_password(password, user.password_hash):
            logger.warning(f"[AuthService] Mot de passe incorrect pour: {email}")
            return None

        logger.info(f"[AuthService] Authentification réussie pour: {email} (ID: {user.id})")
        return user

    async def record_login(self, user: User) -> None:
        user.last_login = utcnow()
        self.db.add(user)
        await self.db.commit()

    async def get_user_from_token(self, token: str) -> Optional[UserRead]:
        """
        Récupère un utilisateur à partir d'un token JWT.
        Retourne le schéma UserRead si succès, sinon None.
        """
        user_id = decode_access_token(token)
        if user_id is None:
            logger.warning("[AuthService] Token invalide ou expiré")
            return None

        user: Optional[UserRead] = await self.user_crud.get(
            db=self.db,
            schema_to_select=UserRead,
            return_as_model=True,
            id=user_id,
        )
        if user is None:
            logger.warning(f"[AuthService] Utilisateur ID {user_id} du token non trouvé en base")
            return None

        logger.debug(f"[AuthService] Utilisateur récupéré depuis token: ID {user_id}")
        return user
