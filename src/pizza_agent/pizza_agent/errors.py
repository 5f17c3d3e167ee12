class OrderWorkflowError(Exception):
    """
    Base class for failures of a single workflow operation.

    These are surfaced to the calling agent as operation errors: the
    invocation had no effect on session state.
    """

    code: str
    message: str

    def __init__(self, message: str, code: str = "workflow_error") -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return self.message


class PreconditionError(OrderWorkflowError):
    """Raised locally, before any remote call, when an operation cannot run."""

    def __init__(self, message: str, code: str = "precondition_failed") -> None:
        super().__init__(message, code)


class OrderNotFoundError(PreconditionError):
    def __init__(self, order_id: str) -> None:
        super().__init__(f"Order not found: {order_id}", code="order_not_found")
        self.order_id = order_id


class ItemIndexError(PreconditionError):
    def __init__(self, item_index: int, item_count: int) -> None:
        super().__init__(
            f"Invalid item_index {item_index}. Order only has {item_count} items.",
            code="item_index_out_of_range",
        )
        self.item_index = item_index
        self.item_count = item_count


class StoreLookupError(OrderWorkflowError):
    """Raised when the provider cannot resolve an address to stores."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="store_lookup_failed")


class RemoteSystemError(OrderWorkflowError):
    """Raised for provider outages and malformed or unexpected responses."""

    def __init__(self, message: str, code: str = "remote_system_error") -> None:
        super().__init__(message, code)


class IncompleteMenuError(RemoteSystemError):
    """The menu payload lacks product, variant or topping sections.

    Usually means the store is closed or the identifier is invalid.
    """

    def __init__(self, store_id: str, missing: list[str]) -> None:
        super().__init__(
            f"Incomplete menu data for store {store_id} "
            f"(missing: {', '.join(missing)}); the store may be closed or invalid",
            code="incomplete_menu_data",
        )
        self.store_id = store_id
        self.missing = missing


class CommerceRejectedError(Exception):
    """Raised by a commerce client when the provider rejects a request.

    This is a business outcome (invalid item, declined card, address that
    cannot be geocoded), not a system fault.
    """

    def __init__(self, reason: str, status_items: list[dict] | None = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.status_items = status_items or []
