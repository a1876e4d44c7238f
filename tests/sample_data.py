"""Small raw batches shared by the test modules.

Each builder returns a fresh DataFrame shaped like the loader's bronze
tables, with the defects the cleansers are expected to repair.
"""

from __future__ import annotations

from datetime import datetime

import pandas as pd

from silver_core import EntityType

# Fixed processing time so "future" checks are reproducible.
RUN_TIME = datetime(2025, 6, 6, 12, 0, 0)


def raw_customers() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "cst_id": [29466, 29466, 29466, 11000, None, 11001],
            "cst_key": [
                "AW00029466",
                "AW00029466",
                "AW00029466",
                "AW00011000",
                "SF1566",
                "AW00011001",
            ],
            "cst_firstname": ["Lance", " Lance", "Lance  ", " Jon", "Ghost", "Eugene"],
            "cst_lastname": ["Jimenez", "Jimenez", "Jimenez ", "Yang ", "Row", "Huang"],
            "cst_marital_status": ["S", None, "M", " m", "S", "x"],
            "cst_gndr": [None, "M", "M", "f", "F", None],
            "cst_create_date": [
                "2026-01-25",
                "2026-01-27",
                "2026-01-26",
                "2025-10-06",
                "2026-01-01",
                "2025-10-06",
            ],
        }
    )


def raw_products() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "prd_id": [212, 213, 214, 210],
            "prd_key": [
                "AC-HE-HL-U509-R",
                "AC-HE-HL-U509-R",
                "AC-HE-HL-U509-R",
                "CO-RF-FR-R92B-58",
            ],
            "prd_nm": [
                " Sport-100 Helmet- Red",
                "Sport-100 Helmet- Red",
                "Sport-100 Helmet- Red ",
                "HL Road Frame - Black- 58",
            ],
            "prd_cost": [12, 14, None, None],
            "prd_line": ["S ", "s", "S", "R"],
            "prd_start_dt": ["2011-07-01", "2012-07-01", "2013-07-01", "2003-07-01"],
            "prd_end_dt": ["2007-12-28", "2008-12-27", None, None],
        }
    )


def raw_sales() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "sls_ord_num": ["SO43697", "SO43698", "SO43699", "SO43700", "SO43701"],
            "sls_prd_key": ["BK-R93R-62", "BK-M82S-44", "BK-M82S-38", "BK-R50B-62", "BK-M82B-42"],
            "sls_cust_id": [21768, 28389, 25863, 14501, 11003],
            "sls_order_dt": [20101229, 0, 20101229, 32154, 20101229],
            "sls_ship_dt": [20110105, 20110105, 20110105, 20110105, 20110105],
            "sls_due_dt": [20110110, 20110110, 20110110, 20110110, 20110110],
            "sls_sales": [None, 3400, -50, 100, 699],
            "sls_quantity": [10, 1, 2, 0, 1],
            "sls_price": [25, 3400, 25, None, -699],
        }
    )


def raw_erp_customers() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "cid": ["NASAW00011000", "AW00011001", " NASAW00011002", "NASAW00011003"],
            "bdate": ["1971-10-06", "2099-01-01", "1976-05-10", None],
            "gen": ["Male", "F", " female ", ""],
        }
    )


def raw_erp_locations() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "cid": ["AW-00011000", "AW-00011001", "AW00011002", "AW-00011003", "AW-00011004"],
            "cntry": ["DE", " us ", "USA", None, " Australia "],
        }
    )


def raw_erp_categories() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "id": ["AC_BR", "AC_BC", "CO_RF"],
            "cat": ["Accessories", "Accessories", "Components"],
            "subcat": ["Bike Racks", "Bottles and Cages", "Road Frames"],
            "maintenance": ["Yes", "No", "Yes"],
        }
    )


def raw_batches() -> dict[EntityType, pd.DataFrame]:
    """One raw batch per entity."""
    return {
        EntityType.CRM_CUSTOMER: raw_customers(),
        EntityType.CRM_PRODUCT: raw_products(),
        EntityType.CRM_SALES: raw_sales(),
        EntityType.ERP_CUSTOMER: raw_erp_customers(),
        EntityType.ERP_LOCATION: raw_erp_locations(),
        EntityType.ERP_CATEGORY: raw_erp_categories(),
    }
