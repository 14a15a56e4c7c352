import bcrypt

from auth_service.app.services.unit_of_work import UnitOfWork
from auth_service.domain.entities import AuditEvent, User
from auth_service.libs.result import Error, Result, Return
from .register_dto import RegisterCommand, RegisterResponse


class RegisterUseCase:
    """
    Register Use Case

    Business Logic:
    1. Check if email already exists (case-insensitive)
    2. Hash password with bcrypt cost factor 12
    3. Create User with the default USER role
    4. Create AuditEvent with action=register
    5. Commit transaction atomically
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, command: RegisterCommand) -> Result[RegisterResponse]:
        async with self.uow:
            existing_user = await self.uow.users.get_by_email(command.email)
            if existing_user:
                return Return.err(
                    Error("EMAIL_ALREADY_EXISTS", "Email already registered")
                )

            password_hash = bcrypt.hashpw(
                command.password.encode("utf-8"), bcrypt.gensalt(12)
            )

            user = User(
                email=command.email.strip().lower(),
                password_hash=password_hash.decode("utf-8"),
                full_name=command.full_name,
            )
            user = await self.uow.users.create(user)

            audit_event = AuditEvent(
                user_id=user.id,
                action="register",
                event_metadata={"email": command.email},
            )
            await self.uow.audit_events.create(audit_event)

            await self.uow.commit()

            return Return.ok(
                RegisterResponse(
                    id=str(user.id),
                    email=user.email,
                    full_name=user.full_name,
                    roles=list(user.roles),
                )
            )
