"""Member CRUD operations."""

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from cfp.models.member import Member, MemberLink, MemberProvider


async def create(
    session: AsyncSession,
    email: str,
    display_name: str | None = None,
    avatar_url: str | None = None,
    organization: str | None = None,
    bio: str | None = None,
    location: str | None = None,
    provider: str | None = None,
    provider_user_id: str | None = None,
    links: Iterable[tuple[str, str]] = (),
) -> Member:
    """
    Create a member, optionally with a linked provider identity and profile links.

    Args:
        session: Async database session (transaction managed by API layer)
        email: Unique email address
        display_name: Name shown to other users
        avatar_url: Avatar image URL
        organization: Company or organization
        bio: Short biography
        location: Free-text location
        provider: External identity provider name (e.g. "github")
        provider_user_id: User ID at the provider
        links: (type, url) pairs

    Returns:
        Created Member instance with providers and links loaded

    Raises:
        IntegrityError: If the email is already registered
    """
    member = Member(
        email=email,
        display_name=display_name,
        avatar_url=avatar_url,
        organization=organization,
        bio=bio,
        location=location,
        providers=[],
        links=[MemberLink(type=link_type, url=url) for link_type, url in links],
    )
    if provider is not None:
        member.providers.append(
            MemberProvider(provider=provider, provider_user_id=provider_user_id)
        )
    session.add(member)
    await session.flush()
    return member


async def get_by_email(session: AsyncSession, email: str) -> Member | None:
    """
    Get a member by email, with linked provider identities loaded.

    Args:
        session: Async database session
        email: Email address

    Returns:
        Member instance if found, None otherwise
    """
    stmt = (
        select(Member)
        .where(Member.email == email)
        .options(selectinload(Member.providers))
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def add_provider(
    session: AsyncSession,
    member: Member,
    provider: str,
    provider_user_id: str,
) -> MemberProvider:
    """
    Link an external identity to an existing member.

    Args:
        session: Async database session
        member: Member instance (providers collection loaded)
        provider: Provider name
        provider_user_id: User ID at the provider

    Returns:
        Created MemberProvider instance
    """
    member_provider = MemberProvider(
        member_id=member.id,
        provider=provider,
        provider_user_id=provider_user_id,
    )
    member.providers.append(member_provider)
    await session.flush()
    return member_provider
