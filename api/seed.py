"""Seed script: wipe all data and create fresh test accounts ready for testing.

Usage (from the api directory):
    python seed.py

Usage (from host, via docker):
    docker compose exec api python seed.py
"""
import asyncio

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from edushare.db.database import engine, async_session, init_db
from edushare.models.user import User, UserRole
from edushare.services.auth_service import hash_password


# Test accounts to create
TEST_USERS = [
    {
        'username': 'alice',
        'email': 'alice@example.com',
        'role': UserRole.STUDENT.value,
    },
    {
        'username': 'bob',
        'email': 'bob@example.com',
        'role': UserRole.STUDENT.value,
    },
    {
        'username': 'eve',
        'email': 'eve@example.com',
        'role': UserRole.TEACHER.value,
    },
]
TEST_PASSWORD = 'password123'


async def wipe_all(db: AsyncSession):
    """Truncate all tables in dependency-safe order."""
    tables = [
        'resources',
        'comment_likes',
        'post_likes',
        'comments',
        'posts',
        'follows',
        'system_state',
        'users',
    ]
    for table in tables:
        await db.execute(text(f'TRUNCATE TABLE {table} RESTART IDENTITY CASCADE'))
    await db.commit()
    print('✓ All tables wiped')


async def create_users(db: AsyncSession):
    """Create test users sharing one password."""
    for u in TEST_USERS:
        user = User(
            username=u['username'],
            email=u['email'],
            role=u['role'],
            password_hash=hash_password(TEST_PASSWORD),
        )
        db.add(user)
        await db.flush()
        await db.refresh(user)
        print(f'  ✓ {u["username"]} ({u["role"]}) {u["email"]}, id={user.id}')

    await db.commit()


async def main():
    print()
    print('=' * 50)
    print('  EduShare Seed Script')
    print('=' * 50)
    print()

    await init_db()

    async with async_session() as db:
        print('[1/2] Wiping all data...')
        await wipe_all(db)

        print('[2/2] Creating test users...')
        await create_users(db)

    await engine.dispose()

    print()
    print('Done! Ready for testing.')
    print()
    print('  Users:')
    for u in TEST_USERS:
        print(f'    {u["email"]}  {u["role"]}  password: {TEST_PASSWORD}')
    print()


if __name__ == '__main__':
    asyncio.run(main())
