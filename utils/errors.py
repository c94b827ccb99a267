# utils/errors.py
# Errors raised by the storefront services.
# Every error is local validation, raised synchronously to the caller.


class StorefrontError(Exception):
    pass


class InvalidAmount(StorefrontError, ValueError):
    # negative spend / price, quantity below 1, or not a number at all
    pass


class InvalidCouponDefinition(StorefrontError, ValueError):
    pass


class InvariantViolation(StorefrontError, RuntimeError):
    # should be unreachable given closed enumerations
    pass


class CouponNotEligible(StorefrontError):
    pass


class UnknownCoupon(StorefrontError, KeyError):
    pass


class UnknownProduct(StorefrontError, KeyError):
    pass


class UnknownOrder(StorefrontError, KeyError):
    pass


class CheckoutError(StorefrontError):
    pass
