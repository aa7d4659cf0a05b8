"""Error taxonomy shared by the order and payment services.

Client-facing errors (4xx) carry a stable ``kind`` plus a human message.
``GatewayError`` and ``StoreError`` are operator problems and map to 5xx.
"""

from fastapi import status


class MarketplaceError(Exception):
    kind = "error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(MarketplaceError):
    kind = "validation_error"
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(MarketplaceError):
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class ForbiddenError(MarketplaceError):
    kind = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN


class InvalidStateError(MarketplaceError):
    kind = "invalid_state"
    status_code = status.HTTP_409_CONFLICT


class SignatureError(MarketplaceError):
    kind = "signature_error"
    status_code = status.HTTP_400_BAD_REQUEST


class GatewayError(MarketplaceError):
    kind = "gateway_error"
    status_code = status.HTTP_502_BAD_GATEWAY


class StoreError(MarketplaceError):
    kind = "store_error"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
