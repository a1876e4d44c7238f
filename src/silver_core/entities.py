"""Entity registry: raw (bronze) and cleansed (silver) table layouts.

Each :class:`EntityType` names one source table produced by the loader. The
registry records, per entity:

- the bronze table name and the CSV file the loader drops it from,
- the declared raw columns (a batch missing any of them is a structural
  defect),
- the columns of the cleansed table, in output order.

Examples:
    >>> EntityType.CRM_CUSTOMER.table
    'crm_cust_info'
    >>> EntityType.from_name("erp_location")
    <EntityType.ERP_LOCATION: 'ERP_LOCATION'>
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from silver_core.exceptions import ConfigError


@dataclass(frozen=True)
class TableLayout:
    """Physical layout of one entity.

    Attributes:
        table: Bronze/silver table name (e.g. "crm_cust_info").
        source_file: File path relative to the bronze root.
        raw_columns: Columns the raw batch must carry.
        clean_columns: Columns of the cleansed table, in order.
    """

    table: str
    source_file: str
    raw_columns: tuple[str, ...]
    clean_columns: tuple[str, ...]


class EntityType(str, Enum):
    CRM_CUSTOMER = "CRM_CUSTOMER"
    CRM_PRODUCT = "CRM_PRODUCT"
    CRM_SALES = "CRM_SALES"
    ERP_CUSTOMER = "ERP_CUSTOMER"
    ERP_LOCATION = "ERP_LOCATION"
    ERP_CATEGORY = "ERP_CATEGORY"

    @property
    def layout(self) -> TableLayout:
        return LAYOUTS[self]

    @property
    def table(self) -> str:
        return LAYOUTS[self].table

    @classmethod
    def from_name(cls, name: str) -> EntityType:
        """Resolve an entity from its enum name or its table name (case-insensitive).

        Raises:
            ConfigError: If the name matches no entity.
        """
        key = name.strip().upper()
        for entity in cls:
            if key in (entity.value, entity.table.upper()):
                return entity
        valid = [e.value for e in cls]
        raise ConfigError(f"Unknown entity '{name}'. Valid entities: {valid}")


LAYOUTS: dict[EntityType, TableLayout] = {
    EntityType.CRM_CUSTOMER: TableLayout(
        table="crm_cust_info",
        source_file="source_crm/cust_info.csv",
        raw_columns=(
            "cst_id",
            "cst_key",
            "cst_firstname",
            "cst_lastname",
            "cst_marital_status",
            "cst_gndr",
            "cst_create_date",
        ),
        clean_columns=(
            "cst_id",
            "cst_key",
            "cst_firstname",
            "cst_lastname",
            "cst_marital_status",
            "cst_gndr",
            "cst_create_date",
        ),
    ),
    EntityType.CRM_PRODUCT: TableLayout(
        table="crm_prd_info",
        source_file="source_crm/prd_info.csv",
        raw_columns=(
            "prd_id",
            "prd_key",
            "prd_nm",
            "prd_cost",
            "prd_line",
            "prd_start_dt",
            "prd_end_dt",
        ),
        clean_columns=(
            "prd_id",
            "cat_id",
            "prd_key",
            "prd_nm",
            "prd_cost",
            "prd_line",
            "prd_start_dt",
            "prd_end_dt",
        ),
    ),
    EntityType.CRM_SALES: TableLayout(
        table="crm_sales_details",
        source_file="source_crm/sales_details.csv",
        raw_columns=(
            "sls_ord_num",
            "sls_prd_key",
            "sls_cust_id",
            "sls_order_dt",
            "sls_ship_dt",
            "sls_due_dt",
            "sls_sales",
            "sls_quantity",
            "sls_price",
        ),
        clean_columns=(
            "sls_ord_num",
            "sls_prd_key",
            "sls_cust_id",
            "sls_order_dt",
            "sls_ship_dt",
            "sls_due_dt",
            "sls_sales",
            "sls_quantity",
            "sls_price",
        ),
    ),
    EntityType.ERP_CUSTOMER: TableLayout(
        table="erp_cust_az12",
        source_file="source_erp/CUST_AZ12.csv",
        raw_columns=("cid", "bdate", "gen"),
        clean_columns=("cid", "bdate", "gen"),
    ),
    EntityType.ERP_LOCATION: TableLayout(
        table="erp_loc_a101",
        source_file="source_erp/LOC_A101.csv",
        raw_columns=("cid", "cntry"),
        clean_columns=("cid", "cntry"),
    ),
    EntityType.ERP_CATEGORY: TableLayout(
        table="erp_px_cat_g1v2",
        source_file="source_erp/PX_CAT_G1V2.csv",
        raw_columns=("id", "cat", "subcat", "maintenance"),
        clean_columns=("id", "cat", "subcat", "maintenance"),
    ),
}
