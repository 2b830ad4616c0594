from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy import create_engine, event
from sqlalchemy.pool import StaticPool
from shop.core.config import settings


class Base(DeclarativeBase): pass


def engine_options(url: str) -> dict:
    if url.startswith('sqlite'):
        opts = {'connect_args': {'check_same_thread': False, 'timeout': settings.DB_TIMEOUT_SECONDS}}
        if url in ('sqlite://', 'sqlite:///:memory:'):
            opts['poolclass'] = StaticPool
        return opts
    opts = {'pool_pre_ping': True, 'pool_timeout': settings.DB_TIMEOUT_SECONDS}
    if url.startswith('postgresql'):
        # server-side cap on every statement
        opts['connect_args'] = {'options': f'-c statement_timeout={int(settings.DB_TIMEOUT_SECONDS * 1000)}'}
    return opts


engine = create_engine(settings.DATABASE_URL, **engine_options(settings.DATABASE_URL))

if engine.dialect.name == 'sqlite':
    @event.listens_for(engine, 'connect')
    def _sqlite_foreign_keys(dbapi_conn, _record):
        cur = dbapi_conn.cursor()
        cur.execute('PRAGMA foreign_keys=ON')
        cur.close()

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)
