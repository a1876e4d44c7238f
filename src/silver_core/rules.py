"""Code-to-label rule tables for the Silver layer.

Every categorical repair in the cleansers is a lookup in one of these
tables, keyed by the upper-cased, trimmed raw code. Unknown or missing
codes resolve to ``DEFAULT_LABEL``. The tables are plain dicts so they can
be replaced through :class:`silver_core.config.CleansingConfig`.
"""

from __future__ import annotations

DEFAULT_LABEL = "n/a"

# crm_cust_info.cst_marital_status
MARITAL_STATUS_CODES = {
    "S": "Single",
    "M": "Married",
}

# crm_cust_info.cst_gndr
GENDER_CODES = {
    "M": "Male",
    "F": "Female",
}

# erp_cust_az12.gen (the ERP export spells some values out)
ERP_GENDER_CODES = {
    "M": "Male",
    "MALE": "Male",
    "F": "Female",
    "FEMALE": "Female",
}

# crm_prd_info.prd_line
PRODUCT_LINE_CODES = {
    "M": "Mountain",
    "R": "Road",
    "S": "Other Sales",
    "T": "Touring",
}

# erp_loc_a101.cntry
COUNTRY_CODES = {
    "DE": "Germany",
    "US": "United States",
    "USA": "United States",
}

# erp_cust_az12.cid carries this prefix for some customers
ERP_CUSTOMER_ID_PREFIX = "NAS"

# erp_loc_a101.cid separators (removed to match crm_cust_info.cst_key)
LOCATION_ID_SEPARATORS = "-"

MARITAL_STATUS_LABELS = frozenset(MARITAL_STATUS_CODES.values()) | {DEFAULT_LABEL}
GENDER_LABELS = frozenset(GENDER_CODES.values()) | {DEFAULT_LABEL}
PRODUCT_LINE_LABELS = frozenset(PRODUCT_LINE_CODES.values()) | {DEFAULT_LABEL}
