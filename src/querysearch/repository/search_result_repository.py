"""Repository that executes paginated search queries."""

from typing import Sequence

from loguru import logger
from sqlalchemy import Row
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from querysearch.providers.pagination import PaginationResult


class SearchResultRepository:
    """Runs the statement of a ``PaginationResult`` in its own session.

    Query construction never touches the database; this is the only place
    where a search is executed.
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self.session_maker = session_maker

    async def fetch(self, result: PaginationResult) -> Sequence[Row]:
        """Execute the paginated query and return its rows.

        Raises:
            SQLAlchemyError: Database errors are logged and re-raised
        """
        statement = result.statement()
        logger.trace(f"Executing search {statement}")
        try:
            async with self.session_maker() as session:
                rows = (await session.execute(statement)).fetchall()
        except SQLAlchemyError as e:
            logger.error(f"Database error during search: {e}")
            raise

        logger.debug(f"Search returned {len(rows)} row(s), page={result.page}")
        return rows
