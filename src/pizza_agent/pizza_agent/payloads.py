"""Build the provider's order document from an Order aggregate."""

from typing import Any

from .address import parse_address
from .models import Order, PaymentInstruction

LANGUAGE_CODE = "en"


def build_products(order: Order) -> list[dict[str, Any]]:
    return [
        {
            "Code": item.code,
            "Qty": item.quantity,
            "ID": index + 1,
            "isNew": True,
            "Options": item.options,
        }
        for index, item in enumerate(order.items)
    ]


def build_order_payload(
    order: Order, payments: list[PaymentInstruction] | None = None
) -> dict[str, Any]:
    customer = order.customer
    address = parse_address(customer.address).to_remote() if customer.address else {}
    return {
        "Order": {
            "Address": address,
            "Coupons": [],
            "CustomerID": "",
            "Email": customer.email or "",
            "Extension": "",
            "FirstName": customer.first_name,
            "LastName": customer.last_name,
            "LanguageCode": LANGUAGE_CODE,
            "NoCombine": True,
            "OrderChannel": "OLO",
            "OrderID": order.remote_order_id,
            "OrderMethod": "Web",
            "OrderTaker": None,
            "Partners": {},
            "Payments": [p.to_remote() for p in payments or []],
            "Phone": customer.phone,
            "Products": build_products(order),
            "ServiceMethod": order.service_method.value,
            "SourceOrganizationURI": "order.dominos.com",
            "StoreID": order.store_id,
            "Tags": {},
            "Version": "1.0",
        }
    }
