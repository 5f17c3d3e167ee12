"""Session-scoped state shared across otherwise stateless tool calls.

One SessionStore holds the most recent store search, the selected store,
the last fetched menu and every order created in the session. Workflow
operations receive the store explicitly; nothing in the package keeps a
module-level session.

Orders handed out by get_order() are copies. An operation mutates its copy
and writes it back with update_order() before returning, so a failed call
leaves the stored order untouched.
"""

import uuid

from loguru import logger

from .models import Menu, Order, Store


class SessionStore:
    def __init__(self, session_id: str | None = None) -> None:
        self.session_id = session_id or f"session-{uuid.uuid4()}"
        self._stores: list[Store] = []
        self._selected_store: Store | None = None
        self._selected_store_id: str | None = None
        self._menu: Menu | None = None
        self._orders: dict[str, Order] = {}

    # --- stores ---

    @property
    def stores(self) -> tuple[Store, ...]:
        return tuple(self._stores)

    @property
    def selected_store(self) -> Store | None:
        return self._selected_store

    @property
    def selected_store_id(self) -> str | None:
        return self._selected_store_id

    def record_stores(self, stores: list[Store]) -> None:
        """Replace the candidate list with the latest search result."""
        self._stores = list(stores)
        logger.debug("Session {}: recorded {} stores", self.session_id, len(stores))

    def find_store(self, store_id: str) -> Store | None:
        """Look up a candidate store without changing the selection."""
        return next((s for s in self._stores if s.store_id == store_id), None)

    def select_store(self, store_id: str) -> Store | None:
        """Select a store from the candidate list.

        Returns None when the id is not among the last search results; the
        previous selection is kept in that case.
        """
        store = self.find_store(store_id)
        if store is not None:
            self._selected_store = store
            self._selected_store_id = store.store_id
        return store

    def remember_store_id(self, store_id: str) -> None:
        """Select a store known only by its id (e.g. a resumed conversation)."""
        self._selected_store_id = store_id
        self._selected_store = self.find_store(store_id)

    # --- menu ---

    @property
    def menu(self) -> Menu | None:
        return self._menu

    def record_menu(self, menu: Menu) -> None:
        self._menu = menu

    # --- orders ---

    def create_order(self, order: Order) -> str:
        """Register a new order and return its freshly issued id."""
        order_id = str(uuid.uuid4())
        while order_id in self._orders:
            order_id = str(uuid.uuid4())
        self._orders[order_id] = order.model_copy(
            update={"order_id": order_id}, deep=True
        )
        logger.debug("Session {}: created order {}", self.session_id, order_id)
        return order_id

    def get_order(self, order_id: str) -> Order | None:
        order = self._orders.get(order_id)
        return order.model_copy(deep=True) if order is not None else None

    def update_order(self, order_id: str, order: Order) -> Order | None:
        """Replace an existing order. Returns None if the id is unknown."""
        if order_id not in self._orders:
            return None
        self._orders[order_id] = order.model_copy(deep=True)
        return self._orders[order_id]

    def order_ids(self) -> list[str]:
        """Ids of all orders in creation order."""
        return list(self._orders)

    def __len__(self) -> int:
        return len(self._orders)
