"""Repositories for users, credential accounts and sessions."""

from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Account, Session, User
from .base import BaseRepository

CREDENTIAL_PROVIDER = "credential"


class UserRepository(BaseRepository[User]):
    """Репозиторий пользователей."""

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def get_by_email(self, email: str) -> User | None:
        """
        SQL эквивалент:
            SELECT * FROM users WHERE email = {email};
        """
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()


class AccountRepository(BaseRepository[Account]):
    """Репозиторий учётных записей (хэш пароля хранится здесь, а не в users)."""

    def __init__(self, db: AsyncSession):
        super().__init__(Account, db)

    async def get_credential(self, user_id: str) -> Account | None:
        """Учётная запись email+пароль пользователя."""
        result = await self.db.execute(
            select(Account).where(
                Account.user_id == user_id, Account.provider_id == CREDENTIAL_PROVIDER
            )
        )
        return result.scalar_one_or_none()


class SessionRepository(BaseRepository[Session]):
    """Репозиторий серверных сессий."""

    def __init__(self, db: AsyncSession):
        super().__init__(Session, db)

    async def get_by_token(self, token: str) -> Session | None:
        """
        SQL эквивалент:
            SELECT * FROM sessions WHERE token = {token};
        """
        result = await self.db.execute(select(Session).where(Session.token == token))
        return result.scalar_one_or_none()

    async def delete_by_token(self, token: str) -> bool:
        """Удалить сессию по токену (выход из системы)."""
        result = await self.db.execute(delete(Session).where(Session.token == token))
        return result.rowcount > 0

    async def delete_expired(self, now: datetime) -> int:
        """
        Удалить все истёкшие сессии.

        SQL эквивалент:
            DELETE FROM sessions WHERE expires_at < {now};
        """
        result = await self.db.execute(delete(Session).where(Session.expires_at < now))
        return result.rowcount
