import logging
import os

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from config import config
from db.models import Base

logger = logging.getLogger(__name__)


def init_db(db_file: str | None = None, *, echo: bool = False, reset: bool = False) -> Session:
    db_file = db_file or config().db_file
    if reset and os.path.exists(db_file):
        logger.info("Removing existing database %s", db_file)
        os.remove(db_file)

    engine: Engine = create_engine(f"sqlite:///{db_file}", echo=echo)

    Base.metadata.create_all(engine)
    return sessionmaker(engine)()
