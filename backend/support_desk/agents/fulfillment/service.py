"""
Mock fulfillment lookup.

Stands in for a shipping/order backend: every validated order number is
reported as shipped with DHL. The delay only simulates network latency.
"""
import asyncio
from typing import Optional

from support_desk.schemas.models import OrderStatusInfo
from support_desk.utils.logger import get_logger

logger = get_logger(__name__)

MOCK_STATUS = "shipped"
MOCK_CARRIER = "DHL"
MOCK_TRACKING = "00340434123DE"
MOCK_ETA_DAYS = 2
DEFAULT_DELAY = 0.15


async def get_order_status(order_id: str, delay: Optional[float] = None) -> OrderStatusInfo:
    """Return the shipment status for an already validated order number."""
    logger.info(f"📦 FULFILLMENT: Looking up order {order_id}")
    await asyncio.sleep(DEFAULT_DELAY if delay is None else delay)
    return OrderStatusInfo(
        order_id=order_id,
        status=MOCK_STATUS,
        carrier=MOCK_CARRIER,
        tracking=MOCK_TRACKING,
        eta_days=MOCK_ETA_DAYS,
    )
