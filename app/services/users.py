"""
Local user records bound to external auth subjects
"""

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from datetime import datetime
import structlog

from app.core.dependencies import Identity
from app.models.user import User

logger = structlog.get_logger(__name__)


def fallback_email(identity: Identity) -> str:
    """Placeholder address for identities without an email claim"""
    return f"{identity.auth_provider_id[:12]}@local"


async def ensure_user(session: AsyncSession, identity: Identity, refresh_profile: bool = True) -> User:
    """
    Upsert the local user for an identity (not committed)

    Existing users get their email/name refreshed from the identity when
    refresh_profile is set and the claim is present.
    """
    user = (
        await session.exec(select(User).where(User.auth_provider_id == identity.auth_provider_id))
    ).first()

    if user is None:
        user = User(
            auth_provider_id=identity.auth_provider_id,
            email=identity.email or fallback_email(identity),
            name=identity.name,
        )
        session.add(user)
        await session.flush()
        logger.info("User registered", user_id=str(user.id), auth_provider_id=identity.auth_provider_id)
        return user

    if refresh_profile and (identity.email or identity.name):
        if identity.email:
            user.email = identity.email
        if identity.name:
            user.name = identity.name
        user.updated_at = datetime.utcnow()
        session.add(user)
    return user
