"""Access to the ``[custom]`` section of the aftersales domain configuration."""

from protean.utils.globals import current_domain

_DEFAULTS = {
    "MAX_FAILED_DELIVERY_ATTEMPTS": 3,
    "APOLOGY_COUPON_PERCENT": 20,
    "APOLOGY_COUPON_VALID_DAYS": 365,
    "STORE_CREDIT_VALID_DAYS": 365,
}


def setting(name: str):
    """Return a custom setting, falling back to the built-in default."""
    custom = current_domain.config.get("custom") or {}
    return custom.get(name, _DEFAULTS[name])
