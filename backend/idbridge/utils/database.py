# SPDX-FileCopyrightText: 2024-2025 Pathway Bio, Inc. <https://pwbio.ai>
# SPDX-FileContributor: Kimberly Robasky
# SPDX-License-Identifier: Apache-2.0

"""
Member database engine and sessions
"""
import logging

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

Base = declarative_base()

IN_MEMORY_URLS = ('sqlite://', 'sqlite:///:memory:')


def create_session_factory(url: str) -> sessionmaker:
    """Create the engine, ensure tables exist, and return a session factory"""
    kwargs = {}
    if url.startswith('sqlite'):
        # SQLite connections are shared with FastAPI's threadpool
        kwargs['connect_args'] = {'check_same_thread': False}
        if url in IN_MEMORY_URLS:
            kwargs['poolclass'] = StaticPool

    engine = create_engine(url, **kwargs)

    # Import models so they register on Base before create_all
    from . import members  # noqa: F401
    Base.metadata.create_all(bind=engine)

    logger.info(f"Member database ready: {engine.url.render_as_string(hide_password=True)}")
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request):
    """FastAPI dependency yielding a database session"""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
