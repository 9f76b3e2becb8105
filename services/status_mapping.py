from models.status import PaymentStatus

_PROVIDER_STATUS = {
    "approved": PaymentStatus.APPROVED,
    "cancelled": PaymentStatus.CANCELLED,
    "rejected": PaymentStatus.CANCELLED,
    "refunded": PaymentStatus.REFUNDED,
}


def map_provider_status(provider_status) -> str:
    """
    Map a MercadoPago payment status onto our payment vocabulary.

    Lossy and total: pending, in_process, authorized, charged_back, None and
    anything unrecognised all become PENDING.
    """
    if not isinstance(provider_status, str):
        return PaymentStatus.PENDING
    return _PROVIDER_STATUS.get(provider_status, PaymentStatus.PENDING)
