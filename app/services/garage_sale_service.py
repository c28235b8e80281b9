"""
Read access to published garage sales
"""

import logging
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId

from app.db.mongodb import mongodb
from app.models.garage_sale import GarageSale

logger = logging.getLogger(__name__)


class GarageSaleService:
    """Loads listings created by the sale publishing flow"""

    async def get_garage_sale(self, garage_sale_id: str) -> Optional[GarageSale]:
        try:
            db = mongodb.get_database()
            sale_doc = await db.garage_sales.find_one({"_id": ObjectId(garage_sale_id)})

            if sale_doc:
                sale_doc["id"] = str(sale_doc["_id"])
                return GarageSale(**sale_doc)
            return None
        except InvalidId:
            logger.warning("Invalid garage sale id: %s", garage_sale_id)
            return None
