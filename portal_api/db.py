from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

Base = declarative_base()


def make_engine(url: str, **engine_options):
	"""Build the shared, pooled engine behind a DocumentStore.

	Extra keyword arguments go straight to ``create_engine`` (tests pass a
	StaticPool and ``check_same_thread=False`` for in-memory SQLite).
	"""
	engine_options.setdefault("pool_pre_ping", True)
	return create_engine(url, **engine_options)


def make_session_factory(engine):
	return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
