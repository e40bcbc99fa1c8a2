"""
Rule Store

Persisted collection of traffic rules plus read access to the reference sets.
All other components read and write through a store session.

Validate-then-persist runs inside one store transaction. On PostgreSQL the
transaction is SERIALIZABLE, so two operators creating rules with the same
name concurrently cannot both commit: one of them gets a serialization
failure, is retried against a fresh snapshot, and then fails validation.

Version: traffic_rules_v1
"""

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional, TypeVar

import psycopg2
from psycopg2 import errors as pg_errors
from psycopg2.extensions import ISOLATION_LEVEL_SERIALIZABLE
from psycopg2.extras import Json

from netrules.catalog.models import (
    ReferenceKind,
    ReferenceRecord,
    ReferenceSets,
    REFERENCE_TABLES,
)
from netrules.shared.db import ensure_schema, get_db
from netrules.shared.errors import (
    ConcurrentModificationError,
    PersistenceError,
    TrafficRuleError,
)
from .models import CONDITION_FIELDS, TrafficRule, WRITABLE_FIELDS

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_TRANSACTION_ATTEMPTS = 3


class RuleStoreSession(ABC):
    """Operations available inside one store transaction."""

    @abstractmethod
    def list_rules(
        self,
        enabled_only: bool = False,
        user_group_id: Optional[str] = None,
        traffic_type_id: Optional[str] = None,
    ) -> List[TrafficRule]:
        """Rules ordered by priority ascending (ties by creation order)."""

    @abstractmethod
    def get_rule(self, rule_id: str) -> Optional[TrafficRule]:
        ...

    @abstractmethod
    def insert_rule(self, fields: Dict[str, Any]) -> TrafficRule:
        ...

    @abstractmethod
    def update_rule(self, rule_id: str, fields: Dict[str, Any]) -> Optional[TrafficRule]:
        """Apply writable fields; None when the rule does not exist."""

    @abstractmethod
    def delete_rule(self, rule_id: str) -> bool:
        ...

    @abstractmethod
    def load_reference_sets(self) -> ReferenceSets:
        ...


class RuleStore(ABC):
    """Factory of store transactions."""

    @abstractmethod
    def transaction(self) -> Iterator[RuleStoreSession]:
        """Context manager yielding a session; commits on clean exit."""

    @abstractmethod
    def healthy(self) -> bool:
        ...

    def run_in_transaction(self, work: Callable[[RuleStoreSession], T]) -> T:
        """
        Run `work` in a transaction, retrying on serialization conflicts.

        `work` must not trigger side effects outside the store; it may run
        more than once.
        """
        for attempt in range(1, MAX_TRANSACTION_ATTEMPTS + 1):
            try:
                with self.transaction() as session:
                    return work(session)
            except ConcurrentModificationError:
                if attempt == MAX_TRANSACTION_ATTEMPTS:
                    raise
                logger.warning(
                    f"Serialization conflict, retrying (attempt {attempt + 1}/{MAX_TRANSACTION_ATTEMPTS})"
                )
        raise ConcurrentModificationError("Transaction could not be completed")


# ===== PostgreSQL =====

def _column_value(name: str, value: Any) -> Any:
    if name in CONDITION_FIELDS:
        return Json(value or {})
    return value


def _column_name(field: str) -> str:
    return "rule_name" if field == "name" else field


class PostgresRuleSession(RuleStoreSession):
    def __init__(self, cursor):
        self.cur = cursor

    def list_rules(self, enabled_only=False, user_group_id=None, traffic_type_id=None):
        clauses = []
        params: List[Any] = []
        if enabled_only:
            clauses.append("is_enabled = TRUE")
        if user_group_id:
            clauses.append("user_group_id::text = %s")
            params.append(user_group_id)
        if traffic_type_id:
            clauses.append("traffic_type_id::text = %s")
            params.append(traffic_type_id)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        self.cur.execute(f"""
            SELECT * FROM traffic_rules
            {where}
            ORDER BY priority ASC, created_at ASC, id ASC
        """, params)
        return [TrafficRule.from_row(row) for row in self.cur.fetchall()]

    def get_rule(self, rule_id):
        self.cur.execute(
            "SELECT * FROM traffic_rules WHERE id::text = %s",
            (rule_id,),
        )
        row = self.cur.fetchone()
        return TrafficRule.from_row(row) if row else None

    def insert_rule(self, fields):
        values = {k: v for k, v in fields.items() if k in WRITABLE_FIELDS}
        columns = [_column_name(k) for k in values]
        placeholders = ", ".join(["%s"] * len(columns))
        self.cur.execute(f"""
            INSERT INTO traffic_rules ({", ".join(columns)})
            VALUES ({placeholders})
            RETURNING *
        """, [_column_value(k, v) for k, v in values.items()])
        return TrafficRule.from_row(self.cur.fetchone())

    def update_rule(self, rule_id, fields):
        values = {k: v for k, v in fields.items() if k in WRITABLE_FIELDS}
        assignments = [f"{_column_name(k)} = %s" for k in values]
        assignments.append("updated_at = NOW()")
        params = [_column_value(k, v) for k, v in values.items()]
        params.append(rule_id)
        self.cur.execute(f"""
            UPDATE traffic_rules
            SET {", ".join(assignments)}
            WHERE id::text = %s
            RETURNING *
        """, params)
        row = self.cur.fetchone()
        return TrafficRule.from_row(row) if row else None

    def delete_rule(self, rule_id):
        self.cur.execute(
            "DELETE FROM traffic_rules WHERE id::text = %s RETURNING id",
            (rule_id,),
        )
        return self.cur.fetchone() is not None

    def load_reference_sets(self):
        loaded: Dict[ReferenceKind, List[ReferenceRecord]] = {}
        for kind, ref in REFERENCE_TABLES.items():
            self.cur.execute(f"SELECT * FROM {ref.table}")
            loaded[kind] = [ReferenceRecord.from_row(kind, row) for row in self.cur.fetchall()]
        return ReferenceSets(
            user_groups=loaded[ReferenceKind.USER_GROUP],
            traffic_types=loaded[ReferenceKind.TRAFFIC_TYPE],
            network_paths=loaded[ReferenceKind.NETWORK_PATH],
            tunnels=loaded[ReferenceKind.TUNNEL],
        )


class PostgresRuleStore(RuleStore):
    """Rule store backed by PostgreSQL (psycopg2, RealDictCursor rows)."""

    def __init__(self, database_url: Optional[str] = None, bootstrap_schema: bool = True):
        self._database_url = database_url
        self._bootstrap_schema = bootstrap_schema
        self._schema_ready = False

    def _connect(self):
        conn = get_db(self._database_url)
        if conn is None:
            raise PersistenceError("Database connection failed")
        if self._bootstrap_schema and not self._schema_ready:
            self._schema_ready = ensure_schema(conn)
        return conn

    @contextmanager
    def transaction(self):
        conn = self._connect()
        try:
            conn.set_session(isolation_level=ISOLATION_LEVEL_SERIALIZABLE)
            cur = conn.cursor()
            yield PostgresRuleSession(cur)
            conn.commit()
            cur.close()
        except pg_errors.SerializationFailure as e:
            conn.rollback()
            raise ConcurrentModificationError(f"Concurrent rule modification: {e}")
        except TrafficRuleError:
            conn.rollback()
            raise
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Rule store error: {e}")
            raise PersistenceError(f"Rule store error: {str(e).strip()}")
        finally:
            conn.close()

    def healthy(self) -> bool:
        conn = get_db(self._database_url)
        if not conn:
            return False
        try:
            cur = conn.cursor()
            cur.execute("SELECT 1")
            cur.close()
            return True
        except psycopg2.Error as e:
            logger.error(f"Health check failed: {e}")
            return False
        finally:
            conn.close()
