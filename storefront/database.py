from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine


def build_engine(database_url: str, echo: bool = False) -> Engine:
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
        )

    return create_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,      # checks dead connections
        pool_recycle=1800        # refresh every 30 min
    )


def create_db_and_tables(engine: Engine):
    from storefront.models import Order, OrderItem, OrderEvent  # noqa: F401
    SQLModel.metadata.create_all(engine)
