from enum import Enum


class ServiceType(str, Enum):
    RIDE = "ride"
    DELIVERY = "delivery"
    CARPOOL = "carpool"

    def __str__(self):
        return self.value


class VehicleType(str, Enum):
    STANDARD = "standard"
    PREMIUM = "premium"
    MOTO = "moto"

    def __str__(self):
        return self.value


class TransactionType(str, Enum):
    RIDE = "ride"
    DELIVERY = "delivery"
    TIP = "tip"

    def __str__(self):
        return self.value


class ValidationType(str, Enum):
    RFC = "rfc"
    DOCUMENTS = "documents"
    ALL = "all"

    def __str__(self):
        return self.value


class DocumentStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    def __str__(self):
        return self.value


class InvoiceKind(str, Enum):
    RIDE = "ride"
    DELIVERY = "delivery"

    def __str__(self):
        return self.value
