"""Conditionally required order fields.

Whether a customer address is needed depends on the service method and on
how the order will be paid for. The rule is kept in one table and evaluated
wherever the inputs become known: at creation the payment type is still
unknown (None), so only delivery orders need an address there; at placement
the payment type is known and a carryout order paid by card needs one as
its billing address.
"""

from .enums import PaymentType, ServiceMethod
from .errors import PreconditionError

# (service method, payment type or None if not yet known) -> reason, or None
ADDRESS_REQUIREMENTS: dict[tuple[ServiceMethod, PaymentType | None], str | None] = {
    (ServiceMethod.DELIVERY, None): "Delivery orders require a customer address",
    (ServiceMethod.DELIVERY, PaymentType.CASH): "Delivery orders require a customer address",
    (ServiceMethod.DELIVERY, PaymentType.CREDIT): "Delivery orders require a customer address",
    (ServiceMethod.CARRYOUT, None): None,
    (ServiceMethod.CARRYOUT, PaymentType.CASH): None,
    (ServiceMethod.CARRYOUT, PaymentType.CREDIT): (
        "Carryout orders paid by credit card require a customer address "
        "to use as the billing address"
    ),
}

CARD_FIELDS = ("card_number", "expiration", "security_code")


def address_requirement(
    service_method: ServiceMethod, payment_type: PaymentType | None = None
) -> str | None:
    """Return why an address is required, or None when it is optional."""
    return ADDRESS_REQUIREMENTS[(service_method, payment_type)]


def require_address(
    service_method: ServiceMethod,
    address: str | None,
    payment_type: PaymentType | None = None,
) -> None:
    reason = address_requirement(service_method, payment_type)
    if reason and not (address and address.strip()):
        raise PreconditionError(reason, code="address_required")


def require_card_details(payment_type: PaymentType, **fields: str | None) -> None:
    """Credit payments need every card field; cash needs none."""
    if payment_type is not PaymentType.CREDIT:
        return
    missing = [name for name in CARD_FIELDS if not fields.get(name)]
    if missing:
        raise PreconditionError(
            "Card details are required for credit payment "
            f"(missing: {', '.join(missing)})",
            code="card_details_required",
        )


def card_type_for(number: str) -> str:
    """Infer the card brand the provider expects from the number prefix."""
    digits = "".join(ch for ch in number if ch.isdigit())
    if digits.startswith("4"):
        return "VISA"
    if digits[:2] in {"34", "37"}:
        return "AMEX"
    if digits[:2] in {"51", "52", "53", "54", "55"} or (
        len(digits) >= 4 and 2221 <= int(digits[:4]) <= 2720
    ):
        return "MASTERCARD"
    if digits.startswith(("6011", "65")) or digits[:3] in {"644", "645", "646", "647", "648", "649"}:
        return "DISCOVER"
    if digits[:4] in {"3528", "3529"} or digits[:3] in {"353", "354", "355", "356", "357", "358"}:
        return "JCB"
    if digits[:3] in {"300", "301", "302", "303", "304", "305"} or digits[:2] in {"36", "38"}:
        return "DINERS"
    return ""
