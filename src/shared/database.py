"""Relational store helpers shared by every storefront context.

Protean owns the engines; ``setup_db`` and ``drop_db`` create and drop the
schema of every relational provider. On SQLite the provider's engine is
switched to ``BEGIN IMMEDIATE`` so concurrent writers queue on the database
lock instead of failing with a lock upgrade conflict, which gives the
conditional stock and coupon updates serialisable behaviour on SQLite as well
as on PostgreSQL.
"""

from datetime import UTC, datetime

import structlog
from protean.domain import Domain
from sqlalchemy import Engine, event

logger = structlog.get_logger(__name__)

# Seconds a writer waits for the SQLite database lock
SQLITE_BUSY_TIMEOUT = 30


def utc_now() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to timestamps read back from backends that drop tzinfo."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _immediate_transactions(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        # Let SQLAlchemy emit BEGIN itself
        dbapi_connection.isolation_level = None
        dbapi_connection.execute(f"PRAGMA busy_timeout = {SQLITE_BUSY_TIMEOUT * 1000}")

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    # Pooled connections predate the listeners
    engine.dispose()


def configure_providers(domain: Domain) -> None:
    """Tune the engines of an initialised domain for concurrent writers."""
    for name, provider in domain.providers.items():
        engine = getattr(provider, "_engine", None)
        if engine is not None and engine.dialect.name == "sqlite":
            _immediate_transactions(engine)
            logger.debug("sqlite_immediate_transactions", provider=name)


def _register_models(domain: Domain, provider) -> None:
    # Touching ``_dao`` builds the element's model and registers its table
    for registry in (domain.registry.aggregates, domain.registry.entities):
        for _, record in registry.items():
            if record.cls.meta_.provider == provider.name:
                domain.repository_for(record.cls)._dao  # noqa: B018


def setup_db(domain: Domain) -> None:
    """Create the tables and indexes of every relational provider."""
    with domain.domain_context():
        for name, provider in domain.providers.items():
            if provider.conn_info["provider"] in ("sqlite", "postgresql"):
                _register_models(domain, provider)
                provider._metadata.create_all(provider._engine)
                logger.info("schema_created", provider=name)


def drop_db(domain: Domain) -> None:
    with domain.domain_context():
        for name, provider in domain.providers.items():
            if provider.conn_info["provider"] in ("sqlite", "postgresql"):
                provider._metadata.drop_all(provider._engine)
                logger.info("schema_dropped", provider=name)
