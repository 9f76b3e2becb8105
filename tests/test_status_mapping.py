import pytest

from models.status import PaymentStatus
from services.status_mapping import map_provider_status


@pytest.mark.parametrize(
    "provider_status, expected",
    [
        ("approved", PaymentStatus.APPROVED),
        ("cancelled", PaymentStatus.CANCELLED),
        ("rejected", PaymentStatus.CANCELLED),
        ("refunded", PaymentStatus.REFUNDED),
        ("pending", PaymentStatus.PENDING),
        ("in_process", PaymentStatus.PENDING),
        ("charged_back", PaymentStatus.PENDING),
    ],
)
def test_known_provider_statuses(provider_status, expected):
    assert map_provider_status(provider_status) == expected


@pytest.mark.parametrize("junk", ["", "APPROVED", "something-new", None, 42, {"status": "approved"}])
def test_unrecognised_values_degrade_to_pending(junk):
    assert map_provider_status(junk) == PaymentStatus.PENDING


def test_every_result_is_a_payment_status():
    for value in ["approved", "rejected", "refunded", "authorized", "x" * 300]:
        assert map_provider_status(value) in PaymentStatus.ALL
