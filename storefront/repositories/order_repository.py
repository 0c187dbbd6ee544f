import logging
from contextlib import contextmanager
from typing import List, Optional

from sqlalchemy import text, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload
from sqlmodel import Session, select

from storefront.exceptions import StoreUnavailableError
from storefront.models.order import Order
from storefront.models.order_item import OrderItem
from storefront.services.order_event_service import list_order_events, log_order_event
from storefront.utils.pagination import paginate

logger = logging.getLogger(__name__)

# Columns reported back for every row a conditional update touched
RETURNED_COLUMNS = (
    Order.id,
    Order.order_reference,
    Order.customer_name,
    Order.customer_email,
    Order.status,
    Order.payment_status,
)


class OrderStore:
    """
    Row-level access to ``orders`` and ``order_items``.

    Every method runs in its own session and transaction. Conditional writes
    go through ``update_where``, whose result lists exactly the rows that
    matched at write time.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    @contextmanager
    def _session(self):
        session = Session(self.engine)
        try:
            yield session
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Order store error: {e}")
            raise StoreUnavailableError(str(e)) from e
        finally:
            session.close()

    def ping(self) -> bool:
        with self._session() as session:
            session.exec(text("SELECT 1"))
        return True

    def insert_order(self, order: Order, event: Optional[dict] = None) -> Order:
        with self._session() as session:
            session.add(order)
            session.flush()
            if event:
                log_order_event(session, order_id=order.id, **event)
            session.commit()
            session.refresh(order)
        return order

    def insert_items(self, order_id: str, items: List[OrderItem]) -> None:
        with self._session() as session:
            for item in items:
                item.order_id = order_id
                session.add(item)
            session.commit()

    def get_by_reference(self, order_reference: str) -> Optional[Order]:
        with self._session() as session:
            return session.exec(
                select(Order)
                .where(Order.order_reference == order_reference)
                .options(selectinload(Order.items))
            ).first()

    def list_events(self, order_id: str):
        with self._session() as session:
            return list(list_order_events(session, order_id))

    def select_where(self, *criteria) -> List[Order]:
        with self._session() as session:
            return list(session.exec(
                select(Order).where(*criteria).order_by(Order.created_at)
            ).all())

    def update_where(
        self,
        *criteria,
        values: dict,
        event: Optional[dict] = None,
    ) -> List[dict]:
        """
        ``UPDATE orders SET values WHERE criteria RETURNING ...`` in one
        transaction. When ``event`` is given an order event is logged for
        each affected row before the commit.
        """
        if not criteria:
            raise ValueError("update_where needs at least one criterion")

        statement = (
            update(Order)
            .where(*criteria)
            .values(**values)
            .returning(*RETURNED_COLUMNS)
            .execution_options(synchronize_session=False)
        )

        with self._session() as session:
            rows = [dict(row._mapping) for row in session.exec(statement).all()]
            if event:
                for row in rows:
                    log_order_event(session, order_id=row["id"], **event)
            session.commit()

        return rows

    def list_orders(self, *criteria, page: int = 1, limit: int = 10) -> dict:
        with self._session() as session:
            query = (
                select(Order)
                .where(*criteria)
                .order_by(Order.created_at.desc())
            )
            return paginate(
                session=session,
                query=query,
                page=page,
                limit=limit,
                options=(selectinload(Order.items),),
            )
