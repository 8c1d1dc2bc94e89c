"""Error types raised while loading and resolving product configurations."""

from typing import Any, Optional

__all__ = [
    "ConfiguratorError",
    "ProductUnavailable",
    "ProductNotFound",
    "ProductHidden",
    "MalformedCell",
]


class ConfiguratorError(Exception):
    """Base class for configurator errors."""


class ProductUnavailable(ConfiguratorError):
    """The requested product cannot be shown on this page view.

    Fatal for the page: callers render an unavailable state and must not
    fall back to a different model.
    """

    def __init__(self, model_key: str, message: Optional[str] = None):
        self.model_key = model_key
        super().__init__(message or f"Product not available: {model_key}")


class ProductNotFound(ProductUnavailable):
    """No product row matches the requested model key."""

    def __init__(self, model_key: str):
        super().__init__(model_key, f"Product not found: {model_key}")


class ProductHidden(ProductUnavailable):
    """The product row exists but is marked not visible."""

    def __init__(self, model_key: str):
        super().__init__(model_key, f"Product not visible: {model_key}")


class MalformedCell(ValueError):
    """A numeric or boolean cell could not be parsed.

    Never fatal: the normalizer swallows it and substitutes a default.
    """

    def __init__(self, value: Any, expected: str = "number"):
        self.value = value
        self.expected = expected
        super().__init__(f"Cannot parse {value!r} as {expected}")
