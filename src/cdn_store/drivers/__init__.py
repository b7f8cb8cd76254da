"""Driver implementations."""

from cdn_store.drivers._cdn import ContentDeliveryDriver

__all__ = ["ContentDeliveryDriver"]
