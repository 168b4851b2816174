"""
Lifecycle enumerations for users, riders, parcels and payments.

Values are the lowercase wire format used by the HTTP surface.
"""

import enum


class UserRole(str, enum.Enum):
    """
    User role enumeration.

    Roles:
        USER: Creates and pays for parcels (default role)
        RIDER: Set once, as a side effect of rider approval
        ADMIN: Operates the fleet; only granted by another admin
    """
    USER = "user"
    RIDER = "rider"
    ADMIN = "admin"


class RiderStatus(str, enum.Enum):
    """
    Rider application status.

    Status flow:
        PENDING → APPROVED | REJECTED
        APPROVED → DEACTIVATED
    REJECTED and DEACTIVATED are terminal.
    """
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    DEACTIVATED = "deactivated"


class RiderDecision(str, enum.Enum):
    """Admin decision on a pending rider application."""
    APPROVED = "approved"
    REJECTED = "rejected"


class PaymentStatus(str, enum.Enum):
    UNPAID = "unpaid"
    PAID = "paid"


class DeliveryStatus(str, enum.Enum):
    """
    Parcel delivery status.

    Status flow (forward only):
        NOT_COLLECTED → ASSIGNED → TRANSIT → DELIVERED
    """
    NOT_COLLECTED = "not_collected"
    ASSIGNED = "assigned"
    TRANSIT = "transit"
    DELIVERED = "delivered"


class ParcelType(str, enum.Enum):
    DOCUMENT = "document"
    NON_DOCUMENT = "non_document"


class PaymentRecordStatus(str, enum.Enum):
    SUCCESS = "success"


# Position of each delivery status in the forward-only sequence
DELIVERY_SEQUENCE = {
    DeliveryStatus.NOT_COLLECTED: 0,
    DeliveryStatus.ASSIGNED: 1,
    DeliveryStatus.TRANSIT: 2,
    DeliveryStatus.DELIVERED: 3,
}

# Statuses in which a parcel carries an assigned-rider snapshot
RIDER_BEARING_STATUSES = frozenset({
    DeliveryStatus.ASSIGNED,
    DeliveryStatus.TRANSIT,
    DeliveryStatus.DELIVERED,
})

# Statuses counted as open work for a rider
PENDING_DELIVERY_STATUSES = (DeliveryStatus.ASSIGNED, DeliveryStatus.TRANSIT)
