from .quantity import quantize_quantity, require_positive_quantity

__all__ = ["quantize_quantity", "require_positive_quantity"]
