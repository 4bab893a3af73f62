"""Authentication service: email + password credentials and server-side sessions."""

import secrets
from dataclasses import dataclass
from datetime import timedelta

from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.exceptions import AuthenticationError, ConflictError, NotFoundError, ValidationError_
from ..core.logging import get_logger
from ..models import Account, Session, User
from ..models.base import utc_now
from ..repositories import AccountRepository, SessionRepository, UserRepository
from ..repositories.user import CREDENTIAL_PROVIDER

logger = get_logger(__name__)

# pbkdf2_sha256 - чистый Python, не требует нативных зависимостей
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

PASSWORD_MIN_LENGTH = 8
INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"


@dataclass
class AuthResult:
    """User together with a freshly issued session."""

    user: User
    session: Session


class AuthService:
    """
    Сервис аутентификации.

    Доменная часть приложения (задачи, теги) знает о пользователе
    только его id. Здесь живёт всё остальное: регистрация, вход,
    выдача и проверка токенов сессий.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.user_repo = UserRepository(db)
        self.account_repo = AccountRepository(db)
        self.session_repo = SessionRepository(db)

    async def sign_up(
        self,
        name: str,
        email: str,
        password: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuthResult:
        """
        Зарегистрировать пользователя и сразу открыть сессию.

        Raises:
            ValidationError_: пустое имя или короткий пароль
            ConflictError: email уже зарегистрирован
        """
        if not name or not name.strip():
            raise ValidationError_("Name is required", field="name")
        if len(password) < PASSWORD_MIN_LENGTH:
            raise ValidationError_(
                f"Password must be at least {PASSWORD_MIN_LENGTH} characters", field="password"
            )

        email = self._normalize_email(email)
        if await self.user_repo.get_by_email(email):
            raise ConflictError("User with this email already exists", field="email")

        user = await self.user_repo.create(User(name=name.strip(), email=email))
        await self.account_repo.create(
            Account(
                account_id=user.id,
                provider_id=CREDENTIAL_PROVIDER,
                user_id=user.id,
                password=pwd_context.hash(password),
            )
        )
        session = await self._open_session(user, ip_address, user_agent)

        logger.info("User signed up", extra={"user_id": user.id})
        return AuthResult(user=user, session=session)

    async def sign_in(
        self,
        email: str,
        password: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuthResult:
        """
        Войти по email и паролю.

        Неверный email и неверный пароль дают одинаковую ошибку,
        чтобы не раскрывать существование аккаунта.

        Raises:
            AuthenticationError: неверные учётные данные
        """
        user = await self.user_repo.get_by_email(self._normalize_email(email))
        account = await self.account_repo.get_credential(user.id) if user else None

        if not account or not account.password or not pwd_context.verify(
            password, account.password
        ):
            logger.warning("Sign-in failed", extra={"email": email})
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)

        removed = await self.cleanup_expired_sessions()
        if removed:
            logger.info("Expired sessions removed", extra={"count": removed})

        session = await self._open_session(user, ip_address, user_agent)
        logger.info("User signed in", extra={"user_id": user.id})
        return AuthResult(user=user, session=session)

    async def sign_out(self, token: str) -> bool:
        """Закрыть сессию. Returns True если сессия существовала."""
        return await self.session_repo.delete_by_token(token)

    async def resolve_session(self, token: str | None) -> User | None:
        """
        Найти пользователя по токену сессии.

        Истёкшая сессия удаляется и считается отсутствующей. Удаление
        коммитится сразу: следом get_current_user отвечает 401, и get_db
        откатывает транзакцию запроса.
        """
        if not token:
            return None

        session = await self.session_repo.get_by_token(token)
        if not session:
            return None

        if session.expires_at < utc_now():
            user_id = session.user_id
            await self.session_repo.delete(session.id)
            await self.db.commit()
            logger.info("Expired session removed", extra={"user_id": user_id})
            return None

        return await self.user_repo.get_by_id(session.user_id)

    async def delete_user(self, user_id: str) -> None:
        """
        Удалить пользователя.

        Задачи, теги, сессии и учётные записи удаляются каскадно.
        """
        deleted = await self.user_repo.delete(user_id)
        if not deleted:
            raise NotFoundError("User")
        logger.info("User deleted", extra={"user_id": user_id})

    async def cleanup_expired_sessions(self) -> int:
        """Удалить все истёкшие сессии. Returns количество удалённых."""
        return await self.session_repo.delete_expired(utc_now())

    # Вспомогательные методы (private)

    async def _open_session(
        self, user: User, ip_address: str | None, user_agent: str | None
    ) -> Session:
        return await self.session_repo.create(
            Session(
                token=secrets.token_urlsafe(32),
                expires_at=utc_now() + timedelta(days=settings.SESSION_TTL_DAYS),
                ip_address=ip_address,
                user_agent=user_agent,
                user_id=user.id,
            )
        )

    def _normalize_email(self, email: str) -> str:
        return email.strip().lower()
