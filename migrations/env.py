"""Alembic 환경 (app 설정의 DB URL과 모델 메타데이터 사용)"""

import sys
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from sqlalchemy import create_engine, pool

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from app.core.database import Base  # noqa: E402
from app.core.migration import sync_database_url  # noqa: E402

# autogenerate가 테이블을 보도록 모델 등록
from app.domains.comments.models import Comment  # noqa: F401, E402
from app.domains.items.models import Favorite, Item  # noqa: F401, E402
from app.domains.users.models import Follow, User  # noqa: F401, E402

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

DATABASE_URL = sync_database_url()
COMMON_OPTIONS = {
    "target_metadata": Base.metadata,
    "compare_type": True,
}


def run_offline() -> None:
    """DB 연결 없이 SQL 스크립트 출력 (alembic upgrade --sql)"""
    context.configure(
        url=DATABASE_URL,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **COMMON_OPTIONS,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_online() -> None:
    engine = create_engine(DATABASE_URL, poolclass=pool.NullPool)
    try:
        with engine.connect() as connection:
            context.configure(connection=connection, **COMMON_OPTIONS)
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_offline()
else:
    run_online()
