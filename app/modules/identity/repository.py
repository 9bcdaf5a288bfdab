"""Identity directory repository layer."""

from __future__ import annotations

from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import RoleEnum
from app.modules.identity.models import User


class IdentityRepository:
    """DB operations for the identity directory."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_user_by_id(self, user_id: str) -> User | None:
        return await self.session.get(User, user_id)

    async def get_user_by_email(self, email: str) -> User | None:
        stmt = select(User).where(func.lower(User.email) == email.lower())
        return await self.session.scalar(stmt)

    async def create_user(
        self,
        *,
        user_id: str,
        email: str,
        full_name: str | None,
        role: RoleEnum,
        phone: str | None,
    ) -> User:
        user = User(
            id=user_id,
            email=email,
            full_name=full_name,
            role=role,
            phone=phone,
            is_active=True,
        )
        self.session.add(user)
        await self.session.flush()
        return user

    async def save(self, user: User) -> User:
        await self.session.flush()
        return user

    async def list_users(
        self,
        limit: int,
        offset: int,
        *,
        query: str | None = None,
        role: RoleEnum | None = None,
        is_active: bool | None = None,
    ) -> tuple[list[User], int]:
        base_stmt: Select[tuple[User]] = select(User)
        if role is not None:
            base_stmt = base_stmt.where(User.role == role)
        if is_active is not None:
            base_stmt = base_stmt.where(User.is_active.is_(is_active))
        if query is not None:
            pattern = f"%{query}%"
            base_stmt = base_stmt.where(
                or_(
                    User.id.ilike(pattern),
                    User.email.ilike(pattern),
                    User.full_name.ilike(pattern),
                ),
            )

        count_stmt = select(func.count()).select_from(base_stmt.subquery())
        total = int((await self.session.scalar(count_stmt)) or 0)

        stmt = base_stmt.order_by(User.created_at.desc(), User.id.asc()).limit(limit).offset(offset)
        items = list((await self.session.scalars(stmt)).all())
        return items, total

    async def count_users_by_role(self) -> dict[RoleEnum, int]:
        stmt = select(User.role, func.count()).group_by(User.role)
        rows = (await self.session.execute(stmt)).all()
        return {role: int(count) for role, count in rows}
