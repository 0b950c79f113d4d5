"""FastAPI dependency injection."""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker

from src.config import settings
from src.data.anlage_v_service import AnlageVService
from src.data.cache import AfaSettingsCache
from src.data.sql_source import SqlAlchemyDataSource

engine = create_async_engine(settings.database_url, echo=settings.debug)
async_session = async_sessionmaker(engine, expire_on_commit=False)


def get_data_source() -> SqlAlchemyDataSource:
    return SqlAlchemyDataSource(async_session)


def get_afa_cache(request: Request) -> AfaSettingsCache:
    return request.app.state.afa_cache


def get_service(
    source: SqlAlchemyDataSource = Depends(get_data_source),
    afa_cache: AfaSettingsCache = Depends(get_afa_cache),
) -> AnlageVService:
    return AnlageVService(source, afa_cache=afa_cache)
