"""시작 시 스키마 리비전 확인

서버가 뜰 때 DB 리비전과 Alembic head를 비교하고, auto_migrate가 켜져 있으면
head까지 올립니다. 프로덕션에서 확인에 실패하면 기동을 중단합니다.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy import create_engine

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[2]


@dataclass(frozen=True)
class RevisionStatus:
    current: Optional[str]
    head: Optional[str]

    @property
    def is_up_to_date(self) -> bool:
        return self.current == self.head


def sync_database_url(url: Optional[str] = None) -> str:
    """asyncpg URL을 alembic이 쓰는 psycopg2 URL로 변환"""
    return (url or settings.database_url).replace("+asyncpg", "+psycopg2")


def alembic_config() -> Config:
    config = Config(str(PROJECT_ROOT / "alembic.ini"))
    config.set_main_option("script_location", str(PROJECT_ROOT / "migrations"))
    config.set_main_option("sqlalchemy.url", sync_database_url())
    return config


def revision_status(config: Config) -> RevisionStatus:
    """DB의 현재 리비전과 스크립트 head 조회

    연결 실패는 그대로 전파됩니다.
    """
    head = ScriptDirectory.from_config(config).get_current_head()

    engine = create_engine(sync_database_url())
    try:
        with engine.connect() as conn:
            current = MigrationContext.configure(conn).get_current_revision()
    finally:
        engine.dispose()

    return RevisionStatus(current=current, head=head)


def run_migrations_on_startup(auto_migrate: bool = True) -> None:
    """리비전 확인 후 필요하면 upgrade head

    Raises:
        RuntimeError: 프로덕션에서 확인 또는 업그레이드에 실패한 경우
    """
    config = alembic_config()
    try:
        status = revision_status(config)
        if status.is_up_to_date:
            logger.info(f"✅ 스키마 최신 상태 (revision: {status.current})")
            return

        logger.warning(
            f"⚠️ 스키마가 최신이 아닙니다 ({status.current} → {status.head})"
        )
        if not auto_migrate:
            return

        command.upgrade(config, "head")
        logger.info(f"✅ 마이그레이션 완료 (revision: {status.head})")

    except Exception as e:
        logger.error(f"❌ 마이그레이션 확인 실패: {type(e).__name__}: {e}")
        if settings.is_production:
            raise RuntimeError("프로덕션 환경에서 마이그레이션 확인 실패") from e
        logger.warning("⚠️ 개발 환경이므로 데이터베이스 없이 계속 시작합니다.")
