"""Pizza ordering agent: store lookup, menu, order lifecycle and tracking."""

from .client import CommerceClient, DominosClient
from .enums import CategoryName, LifecycleState, PaymentType, ServiceMethod
from .errors import (
    CommerceRejectedError,
    OrderWorkflowError,
    PreconditionError,
    RemoteSystemError,
    StoreLookupError,
)
from .models import Customer, LineItem, Menu, Order, PaymentDetails, Store
from .session import SessionStore
from .tools import build_tools

__all__ = [
    "CategoryName",
    "CommerceClient",
    "CommerceRejectedError",
    "Customer",
    "DominosClient",
    "LifecycleState",
    "LineItem",
    "Menu",
    "Order",
    "OrderWorkflowError",
    "PaymentDetails",
    "PaymentType",
    "PreconditionError",
    "RemoteSystemError",
    "ServiceMethod",
    "SessionStore",
    "Store",
    "StoreLookupError",
    "build_tools",
]
