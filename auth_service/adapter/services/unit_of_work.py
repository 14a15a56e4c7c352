from sqlalchemy.exc import InterfaceError, OperationalError
from sqlmodel.ext.asyncio.session import AsyncSession

from auth_service.adapter.repositories.audit_event_repository import AuditEventRepository
from auth_service.adapter.repositories.session_repository import SessionRepository
from auth_service.adapter.repositories.user_repository import UserRepository
from auth_service.app.repositories.session_repository import StoreUnavailableError
from auth_service.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        # Initialize all repositories with the session
        self.users = UserRepository(self.session)
        self.sessions = SessionRepository(self.session)
        self.audit_events = AuditEventRepository(self.session)
        return self

    async def __aexit__(self, *args):
        # Detach loaded entities so they stay readable once the unit is closed
        self.session.expunge_all()
        await self.rollback()

    async def commit(self):
        try:
            await self.session.commit()
        except (OperationalError, InterfaceError) as exc:
            raise StoreUnavailableError(str(exc)) from exc

    async def rollback(self):
        try:
            await self.session.rollback()
        except (OperationalError, InterfaceError) as exc:
            raise StoreUnavailableError(str(exc)) from exc
