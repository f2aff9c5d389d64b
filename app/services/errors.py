# =========================================================
# CHECKOUT ERRORS
#
# Raised by the checkout engine, translated to HTTP by the
# transaction routes:
# - 400: ValidationError, InsufficientStockError, UnknownItemError
# - 500: StoreUnavailableError, TransactionError
# =========================================================


class CheckoutError(Exception):
    status_code = 400

    def __init__(self, message: str, item_code: str | None = None, line_index: int | None = None):
        super().__init__(message)
        self.message = message
        self.item_code = item_code
        self.line_index = line_index


class ValidationError(CheckoutError):
    pass


class InsufficientStockError(CheckoutError):
    pass


class UnknownItemError(CheckoutError):
    pass


class StoreUnavailableError(CheckoutError):
    status_code = 500


class TransactionError(CheckoutError):
    status_code = 500
