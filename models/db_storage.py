from sqlalchemy import create_engine, event
from sqlalchemy.orm import scoped_session, sessionmaker
from sqlalchemy.exc import SQLAlchemyError

from models.base_model import Base
# Imported for their side effect of registering tables on Base.metadata
from models.user import User
from models.session_record import SessionRecord
from models.product import Product, ProductSize
from models.cart_item import CartItem
from models.order import Order, OrderItem
from models.address import Address

# Map model names for easy querying
classes = {
    "User": User,
    "SessionRecord": SessionRecord,
    "Product": Product,
    "ProductSize": ProductSize,
    "CartItem": CartItem,
    "Order": Order,
    "OrderItem": OrderItem,
    "Address": Address,
}


class DBStorage:
    """Owns the engine and the thread-scoped session.

    Built once by create_app() and shared through app.extensions.
    """

    def __init__(self, database_url: str, echo: bool = False):
        """Initialize engine for the given database URL"""
        self.__session = None
        self.__engine = create_engine(database_url, echo=echo, pool_pre_ping=True)
        if self.__engine.url.get_backend_name() == "sqlite":
            # Enable SQLite foreign keys (needed for ON DELETE CASCADE)
            @event.listens_for(self.__engine, "connect")
            def _set_sqlite_pragma(dbapi_connection, connection_record):
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

    @property
    def engine(self):
        return self.__engine

    def reload(self):
        """Create tables and start session"""
        Base.metadata.create_all(self.__engine)
        session_factory = sessionmaker(bind=self.__engine, expire_on_commit=False)
        self.__session = scoped_session(session_factory)

    def new(self, obj):
        """Add object to session"""
        self.__session.add(obj)

    def save(self):
        """Commit session"""
        try:
            self.__session.commit()
        except SQLAlchemyError:
            self.__session.rollback()
            raise

    def rollback(self):
        self.__session.rollback()

    def delete(self, obj=None):
        """Delete object if exists (hard delete)"""
        if obj:
            self.__session.delete(obj)

    def get(self, cls, id):
        """Fetch one object by class and ID"""
        if cls in classes.values():
            return self.__session.get(cls, id)
        return None

    def close(self):
        """Remove session (for API teardown)"""
        self.__session.remove()

    # expose the SQLAlchemy session for advanced querying (joins, filters, etc.)
    def get_session(self):
        return self.__session
