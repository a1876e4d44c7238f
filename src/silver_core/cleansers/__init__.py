"""Entity cleansers (Silver layer).

One cleanser per source table. Each takes the full raw batch of its entity
and returns the full cleansed snapshot:

==================  ======================  ================================
Entity              Cleanser                Main rules
==================  ======================  ================================
CRM_CUSTOMER        CustomerCleanser        latest row per cst_id, labels
CRM_PRODUCT         ProductCleanser         key split, cost, end-date chain
CRM_SALES           SalesCleanser           YYYYMMDD dates, sales/price
ERP_CUSTOMER        ErpCustomerCleanser     NAS prefix, future birth dates
ERP_LOCATION        ErpLocationCleanser     cid separators, country names
ERP_CATEGORY        ErpCategoryCleanser     projection only
==================  ======================  ================================
"""

from __future__ import annotations

from typing import Optional

from silver_core.cleansers.base import EntityCleanser
from silver_core.cleansers.customers import CustomerCleanser
from silver_core.cleansers.erp import (
    ErpCategoryCleanser,
    ErpCustomerCleanser,
    ErpLocationCleanser,
)
from silver_core.cleansers.products import ProductCleanser
from silver_core.cleansers.sales import SalesCleanser
from silver_core.config import CleansingConfig
from silver_core.entities import EntityType

CLEANSERS: dict[EntityType, type[EntityCleanser]] = {
    EntityType.CRM_CUSTOMER: CustomerCleanser,
    EntityType.CRM_PRODUCT: ProductCleanser,
    EntityType.CRM_SALES: SalesCleanser,
    EntityType.ERP_CUSTOMER: ErpCustomerCleanser,
    EntityType.ERP_LOCATION: ErpLocationCleanser,
    EntityType.ERP_CATEGORY: ErpCategoryCleanser,
}


def get_cleanser(
    entity: EntityType,
    config: Optional[CleansingConfig] = None,
) -> EntityCleanser:
    """Instantiate the cleanser registered for ``entity``."""
    return CLEANSERS[entity](config)


__all__ = [
    "CLEANSERS",
    "CustomerCleanser",
    "EntityCleanser",
    "ErpCategoryCleanser",
    "ErpCustomerCleanser",
    "ErpLocationCleanser",
    "ProductCleanser",
    "SalesCleanser",
    "get_cleanser",
]
