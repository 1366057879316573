from . import applications, vouchers

__all__ = ["applications", "vouchers"]
