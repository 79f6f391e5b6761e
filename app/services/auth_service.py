from anyio import to_thread
from app.core.auditing import AuditSpan
from app.core.config import Settings
from app.core.security import hash_password, verify_password, create_access_token
from app.domain.auth.schemas import OperatorAccount, OperatorReadDTO
from app.domain.exceptions import Unauthorized


def build_operator_account(settings: Settings) -> OperatorAccount:
    return OperatorAccount(
        email=settings.operator_email.strip().lower(),
        password_hash=hash_password(settings.operator_password.get_secret_value())
    )


async def authenticate_operator(email: str, password: str, operator: OperatorAccount) -> OperatorReadDTO:
    ok = False
    if email.strip().lower() == operator.email:
        ok = await to_thread.run_sync(verify_password, password, operator.password_hash)
    if not ok:
        raise Unauthorized("Invalid email or password", ctx={"reason": "bad_credentials"})
    return OperatorReadDTO(email=operator.email)


async def login_operator(
        email: str,
        password: str,
        operator: OperatorAccount,
        settings: Settings
) -> tuple[str, OperatorReadDTO]:
    async with AuditSpan(scope="AUTH", action="LOGIN", object_type="operator") as span:
        user = await authenticate_operator(email, password, operator)
        token = create_access_token(subject=user.email, settings=settings)
        span.meta["subject"] = user.email
        return token, user
