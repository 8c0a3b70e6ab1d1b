import asyncio
import contextlib
import logging
import random
import sys
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import TypeVar

from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy.pool import NullPool

from src.config.settings import settings
from src.errors import StoreTimeoutError, StoreUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def create_engine(url: str):
    url = str(url)
    kwargs = {}
    if "sqlite" in url:
        # aiosqlite connections are bound to the loop that opened them
        kwargs = {"connect_args": {"timeout": 15}, "poolclass": NullPool}
    return create_async_engine(
        url,
        echo=settings.LOG_DB,
        future=True,  # use the sqlalchemy 2.0 classes
        **kwargs,
    )


def generate_test_db_dsn(dsn: str) -> str:
    part_dsn, db_name = str(dsn).rsplit("/", 1)
    return f"{part_dsn}/test_{db_name}"


engine = create_engine(settings.DB_DSN)
if "pytest" in sys.modules:
    # never point the test suite at the configured database
    engine = create_engine(generate_test_db_dsn(settings.DB_DSN))


async_session_maker = async_sessionmaker(engine, expire_on_commit=False)


@contextlib.asynccontextmanager
async def async_session_manager(
    auto_commit=True, session_overwrite: AsyncSession | None = None
) -> AsyncIterator[AsyncSession]:
    """Yield a session that commits on success and rolls back on failure.

    A ``session_overwrite`` is yielded untouched: its owner decides when to
    commit. Every other session is bounded by ``STORE_TIMEOUT_SECONDS`` and
    driver failures surface as store errors.
    """
    if session_overwrite:
        yield session_overwrite
        return

    try:
        async with asyncio.timeout(settings.STORE_TIMEOUT_SECONDS):
            async with async_session_maker() as session:
                try:
                    yield session
                except Exception:
                    await session.rollback()
                    raise
                else:
                    if auto_commit:
                        await session.commit()
    except TimeoutError as e:
        raise StoreTimeoutError() from e
    except DBAPIError as e:
        raise StoreUnavailableError(str(e.orig)) from e


async def run_transaction(
    work: Callable[[AsyncSession], Awaitable[T]],
    session_overwrite: AsyncSession | None = None,
    attempts: int | None = None,
) -> T:
    """Run ``work`` in one transaction, retrying it on version conflicts.

    Rows with a version counter raise ``StaleDataError`` when another writer
    committed first; the work is then replayed against a fresh read.
    """
    max_attempts = attempts or settings.TRANSACTION_MAX_ATTEMPTS
    for attempt in range(1, max_attempts + 1):
        try:
            async with async_session_manager(session_overwrite=session_overwrite) as session:
                result = await work(session)
                await session.flush()
            return result
        except StaleDataError as e:
            if session_overwrite is not None:
                raise StoreUnavailableError("Concurrent update conflict") from e
            logger.info("Concurrent update detected, retrying (%s/%s)", attempt, max_attempts)
            await asyncio.sleep(random.uniform(0, 0.01 * attempt))
    raise StoreUnavailableError(
        f"Gave up after {max_attempts} conflicting attempts, please try again"
    )
