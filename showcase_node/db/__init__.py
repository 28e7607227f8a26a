from .init_db import init_db
from .pg_notify import PgNotifySink, notify
from .repositories import DBDataStore
from .session import database_url, get_engine
