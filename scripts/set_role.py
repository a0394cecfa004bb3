"""사용자 역할 변경 스크립트

관리자 권한(상품/댓글 삭제 우회)은 API로 부여할 수 없으므로
운영자가 이 스크립트로 직접 지정합니다.

사용법:
    python scripts/set_role.py <username> admin
    python scripts/set_role.py <username> user
"""

import asyncio
import sys

from sqlalchemy import select

from app.core.database import async_session_maker, close_db
from app.core.security import Role
from app.domains.users.models import User


async def set_role(username: str, role: Role) -> bool:
    """사용자 역할 변경

    Returns:
        대상 사용자가 있으면 True
    """
    async with async_session_maker() as session:
        result = await session.execute(
            select(User).where(User.username == username)
        )
        user = result.scalar_one_or_none()
        if user is None:
            return False

        user.role = role.value
        await session.commit()
        return True


async def main(argv: list[str]) -> int:
    if len(argv) != 2:
        print(__doc__)
        return 2

    username, role_name = argv
    try:
        role = Role(role_name)
    except ValueError:
        print(f"❌ 알 수 없는 역할: {role_name} (user | admin)")
        return 2

    try:
        found = await set_role(username, role)
    finally:
        await close_db()

    if not found:
        print(f"❌ 사용자를 찾을 수 없습니다: {username}")
        return 1

    print(f"✅ {username} → {role.value}")
    print("  관리자 지정은 다시 로그인해야 적용되며, 해제는 즉시 적용됩니다.")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main(sys.argv[1:])))
