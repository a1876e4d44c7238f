"""Data quality checks for the bronze and silver layers.

Example:
    >>> from silver_core import EntityType
    >>> from silver_core.qa import run_bronze_qa
    >>> report = run_bronze_qa({EntityType.CRM_CUSTOMER: raw_customers})
    >>> report.summary["warning_count"]
"""

from silver_core.qa.api import QAFinding, QAReport, run_bronze_qa, run_silver_qa

__all__ = ["QAFinding", "QAReport", "run_bronze_qa", "run_silver_qa"]
