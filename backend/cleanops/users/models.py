"""
Module définissant les modèles SQLModel pour l'entité User.

Ce module contient :
- UserRole : Rôles du back-office (ADMIN, ASSISTANT).
- UserBase : Classe SQLModel de base avec les champs communs.
- User : Modèle de table SQLModel (table=True) héritant de UserBase.
- UserRead : Schéma de lecture exposé par l'API (sans hash de mot de passe).
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import EmailStr
from sqlmodel import Field, SQLModel

from cleanops.core.schemas import utcnow

class UserRole(str, Enum):
    ADMIN = "ADMIN"
    ASSISTANT = "ASSISTANT"

# Rôles autorisés sur les routes de gestion du stock
STAFF_ROLES = (UserRole.ADMIN, UserRole.ASSISTANT)

# =====================================================
# Schémas: Utilisateurs (SQLModel approach)
# =====================================================

class UserBase(SQLModel):
    """Modèle SQLModel de base pour un utilisateur (données communes, Pydantic)."""
    email: EmailStr = Field(unique=True, index=True, max_length=255, nullable=False)
    first_name: str = Field(max_length=100)
    last_name: str = Field(max_length=100)
    role: UserRole = Field(default=UserRole.ASSISTANT, nullable=False)
    is_active: bool = Field(default=True, nullable=False)

# ----- Modèle de Table -----
class User(UserBase, table=True):
    """Modèle de table SQLModel pour les utilisateurs."""
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True, index=True)
    password_hash: str = Field(nullable=False, max_length=255)
    last_login: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False, sa_column_kwargs={"onupdate": utcnow})

# ----- Schémas API -----
class UserRead(UserBase):
    """Schéma Pydantic/SQLModel pour lire les données d'un utilisateur."""
    id: int
    last_login: Optional[datetime] = None
    created_at: datetime
