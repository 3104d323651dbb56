"""数据库初始化和会话管理."""

import logging
from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import event, inspect, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlmodel import SQLModel

logger = logging.getLogger(__name__)

# 全局引擎和会话工厂
_engine: Any = None
_session_factory: async_sessionmaker[AsyncSession] | None = None

# 旧库可能缺失的列: (表名, 列名, DDL 类型)
_LATE_COLUMNS: list[tuple[str, str, str]] = [
    ("rss_feeds", "last_processed", "TIMESTAMP"),
    ("news_articles", "source_url", "TEXT"),
    ("news_articles", "rss_feed_id", "INTEGER"),
]

# 旧库补列后需要补建的唯一索引: (表名, 列名) -> 索引名
_LATE_UNIQUE_INDEXES: dict[tuple[str, str], str] = {
    ("news_articles", "source_url"): "uq_news_articles_source_url",
}


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """SQLite 默认不检查外键，每个新连接上打开."""
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine.sync_engine, "connect")
    def _set_pragma(dbapi_connection: Any, _connection_record: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


async def init_db(database_url: str) -> None:
    """初始化数据库，创建所有表."""
    global _engine, _session_factory

    _engine = create_async_engine(database_url, echo=False)
    enable_sqlite_foreign_keys(_engine)
    _session_factory = async_sessionmaker(
        _engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    # 添加新列（如果不存在）
    await _add_missing_columns()


def _existing_columns(sync_conn: Any) -> dict[str, set[str]]:
    """读取各表现有列名."""
    inspector = inspect(sync_conn)
    return {
        table: {col["name"] for col in inspector.get_columns(table)}
        for table in inspector.get_table_names()
    }


def _unique_columns(sync_conn: Any, table: str) -> set[str]:
    """读取表上已有唯一约束或唯一索引覆盖的单列."""
    inspector = inspect(sync_conn)
    groups = [c["column_names"] for c in inspector.get_unique_constraints(table)]
    groups += [i["column_names"] for i in inspector.get_indexes(table) if i["unique"]]
    return {cols[0] for cols in groups if len(cols) == 1}


async def _add_missing_columns() -> None:
    """为旧版本数据库补齐后续新增的列."""
    if _engine is None:
        return

    async with _engine.begin() as conn:
        columns = await conn.run_sync(_existing_columns)

        for table, column, ddl_type in _LATE_COLUMNS:
            if column in columns.get(table, set()):
                continue
            logger.info(f"添加 {table}.{column} 列")
            await conn.execute(
                text(f"ALTER TABLE {table} ADD COLUMN {column} {ddl_type}")
            )

        for (table, column), index_name in _LATE_UNIQUE_INDEXES.items():
            if table not in columns:
                continue
            unique = await conn.run_sync(_unique_columns, table)
            if column in unique:
                continue
            logger.info(f"创建唯一索引 {index_name}")
            await conn.execute(
                text(
                    f"CREATE UNIQUE INDEX IF NOT EXISTS {index_name} "
                    f"ON {table} ({column})"
                )
            )


async def close_db() -> None:
    """释放数据库连接."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """获取数据库会话（用于依赖注入）."""
    if _session_factory is None:
        msg = "数据库未初始化，请先调用 init_db()"
        raise RuntimeError(msg)

    async with _session_factory() as session:
        yield session


def async_session_maker() -> async_sessionmaker[AsyncSession]:
    """获取会话工厂（用于后台任务）."""
    if _session_factory is None:
        msg = "数据库未初始化，请先调用 init_db()"
        raise RuntimeError(msg)
    return _session_factory
