# ==============================================================================
# UTILS PACKAGE INITIALIZATION
# ==============================================================================

"""
Utilities Module
================

Helper functions and utilities:
- Pagination helpers
- ID generators
- Date/time and money utilities
"""

from storefront.utils.helpers import (
    as_utc,
    generate_uuid,
    paginate_results,
    quantize_money,
    slugify,
    utc_now,
)

__all__ = [
    "as_utc",
    "generate_uuid",
    "paginate_results",
    "quantize_money",
    "slugify",
    "utc_now",
]
