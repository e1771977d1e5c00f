"""Initialize the database tables."""

from sqlalchemy.engine import Engine

from lazada_gateway.core import models  # noqa: F401  registers the tables
from lazada_gateway.core.database import Base, engine


def init_db(bind: Engine = engine) -> None:
    """Create the credential table if it does not exist yet."""
    Base.metadata.create_all(bind=bind)


if __name__ == "__main__":
    print("Creating database tables...")
    init_db()
    print("Tables created successfully!")
