class BookingStatus:
    CONFIRMED = "CONFIRMED"
    WAITLISTED = "WAITLISTED"
    CANCELLED = "CANCELLED"
    ATTENDED = "ATTENDED"
    NO_SHOW = "NO_SHOW"

    ALL = (CONFIRMED, WAITLISTED, CANCELLED, ATTENDED, NO_SHOW)


class PaymentStatus:
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"

    ALL = (PENDING, APPROVED, CANCELLED, REFUNDED)


class SubscriptionStatus:
    PENDING_PAYMENT = "PENDING_PAYMENT"
    ACTIVE = "ACTIVE"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"
    SUSPENDED = "SUSPENDED"

    ALL = (PENDING_PAYMENT, ACTIVE, CANCELLED, EXPIRED, SUSPENDED)


class BillingCycle:
    MONTHLY = "MONTHLY"
    ANNUAL = "ANNUAL"

    ALL = (MONTHLY, ANNUAL)
