from typing import Any, Dict, Optional
import logging
import re
from datetime import datetime
import pandas as pd
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from services.errors import DownstreamUnavailable, QueryExecutionFailed
from services.sql_candidate import SQLCandidate

# A lone colon before a word would be read as a bind parameter by text(); :: casts are kept
_BIND_COLON = re.compile(r"(?<![:\w\\]):(?=\w)")


def escape_bind_colons(sql: str) -> str:
    return _BIND_COLON.sub(r"\\:", sql)

class QueryExecutor:
    """Runs tagged SQL candidates read-only against the task database"""

    def __init__(self, engine: Engine, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self.engine = engine

    def _connect(self):
        try:
            return self.engine.connect()
        except DBAPIError as e:
            self.logger.error(f"Database unreachable: {str(e)}")
            raise DownstreamUnavailable("No se pudo conectar con la base de datos") from e

    async def execute_query(self, candidate: SQLCandidate) -> Dict[str, Any]:
        """Execute a SELECT candidate and return its rows as a DataFrame.

        The transaction is always rolled back and, on PostgreSQL, declared
        READ ONLY, so a candidate can never modify data. Statement errors raise
        QueryExecutionFailed; connection errors raise DownstreamUnavailable.
        """
        if not candidate.is_sql:
            raise QueryExecutionFailed("Candidate is not a SQL statement", candidate.body)

        self.logger.info(f"Executing query: {candidate.body}")
        start_time = datetime.now()

        connection = self._connect()
        try:
            transaction = connection.begin()
            try:
                if connection.dialect.name == "postgresql":
                    connection.execute(text("SET TRANSACTION READ ONLY"))
                result = connection.execute(text(escape_bind_colons(candidate.body)))
                results = pd.DataFrame(result.fetchall(), columns=list(result.keys()))
            except DBAPIError as e:
                if e.connection_invalidated:
                    self.logger.error(f"Connection lost while executing query: {str(e)}")
                    raise DownstreamUnavailable("Se perdió la conexión con la base de datos") from e
                self.logger.warning(f"Query execution failed: {str(e)}")
                raise QueryExecutionFailed(str(e.orig or e), candidate.body) from e
            except SQLAlchemyError as e:
                self.logger.warning(f"Query execution failed: {str(e)}")
                raise QueryExecutionFailed(str(e), candidate.body) from e
            finally:
                transaction.rollback()
        finally:
            connection.close()

        execution_time = (datetime.now() - start_time).total_seconds()
        self.logger.info(f"Query returned {len(results)} rows in {execution_time:.3f} seconds")

        return {
            "status": "success",
            "results": results,
            "rows": len(results),
            "execution_time": execution_time,
        }
