"""Seed idempotent demo data for local/non-production environments."""

from __future__ import annotations

import argparse
import asyncio
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.database import SessionLocal, close_engine
from app.core.enums import RoleEnum
from app.core.security import create_access_token
from app.modules.catalog.repository import CatalogRepository
from app.modules.catalog.service import CatalogService
from app.modules.identity.models import User

DEMO_USERS: tuple[tuple[str, str, str, RoleEnum], ...] = (
    ("demo-admin", "demo-admin@cleanmarket.dev", "Demo Admin", RoleEnum.ADMIN),
    ("demo-worker-1", "demo-worker-1@cleanmarket.dev", "Demo Worker One", RoleEnum.WORKER),
    ("demo-worker-2", "demo-worker-2@cleanmarket.dev", "Demo Worker Two", RoleEnum.WORKER),
    ("demo-customer", "demo-customer@cleanmarket.dev", "Demo Customer", RoleEnum.CUSTOMER),
)


@dataclass(slots=True)
class SeedStats:
    services_created: int = 0
    users_created: int = 0
    users_updated: int = 0
    tokens: dict[str, str] = field(default_factory=dict)


async def _ensure_user(
    session: AsyncSession,
    *,
    subject_id: str,
    email: str,
    full_name: str,
    role: RoleEnum,
) -> bool:
    user = await session.get(User, subject_id)
    if user is None:
        session.add(User(id=subject_id, email=email, full_name=full_name, role=role, is_active=True))
        await session.flush()
        return True

    user.email = email
    user.full_name = full_name
    user.role = role
    user.is_active = True
    await session.flush()
    return False


async def _run_seed(*, allow_production: bool) -> SeedStats:
    settings = get_settings()
    app_env = settings.app_env.strip().lower()
    if app_env in {"production", "prod"} and not allow_production:
        raise RuntimeError(
            "Refusing to seed demo data in production. "
            "Re-run with --allow-production only if you are absolutely sure.",
        )

    stats = SeedStats()

    async with SessionLocal() as session:
        try:
            catalog_service = CatalogService(CatalogRepository(session))
            stats.services_created = await catalog_service.ensure_default_services()

            for subject_id, email, full_name, role in DEMO_USERS:
                created = await _ensure_user(
                    session,
                    subject_id=subject_id,
                    email=email,
                    full_name=full_name,
                    role=role,
                )
                if created:
                    stats.users_created += 1
                else:
                    stats.users_updated += 1
                stats.tokens[subject_id] = create_access_token(subject_id, role.value)

            await session.commit()
        except Exception:
            await session.rollback()
            raise

    return stats


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Seed idempotent demo data for CleanMarket (service catalog, directory users).",
    )
    parser.add_argument(
        "--allow-production",
        action="store_true",
        help="Allow seeding even when APP_ENV is production/prod.",
    )
    return parser


def _print_summary(stats: SeedStats) -> None:
    print("Demo seed completed.")
    print(f"- Catalog entries created: {stats.services_created}")
    print(f"- Users created: {stats.users_created}")
    print(f"- Users updated: {stats.users_updated}")
    print("")
    print("Development access tokens (non-production only):")
    for subject_id, token in stats.tokens.items():
        print(f"- {subject_id}: {token}")


def main() -> int:
    parser = _build_parser()
    args = parser.parse_args()

    try:
        stats = asyncio.run(_run_seed(allow_production=args.allow_production))
    except Exception as exc:
        print(f"Demo seed failed: {exc}")
        return 1
    finally:
        asyncio.run(close_engine())

    _print_summary(stats)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
