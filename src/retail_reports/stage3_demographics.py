"""
Stage 3: Demographic Aggregation
================================
Buckets customers into fixed age bands and totals quantity and spend per
band.

Bands (inclusive upper bounds): Teen <= 18, Young Adult <= 35,
Adult <= 55, Senior above. Missing and negative ages are excluded.
"""

import logging
import numpy as np
import pandas as pd
from typing import Sequence, Tuple

from .config import DEFAULT_AGE_GROUPS
from .schema import SALES_COLUMNS, validate_columns, add_sale_value

logger = logging.getLogger(__name__)


def assign_age_groups(
    ages: pd.Series,
    age_groups: Sequence[Tuple[str, float]] = DEFAULT_AGE_GROUPS
) -> pd.Series:
    """Map each age to its band label; missing or negative ages map to None."""
    ages = pd.to_numeric(ages, errors='coerce')
    conditions = [ages <= upper for _, upper in age_groups[:-1]]
    labels = [label for label, _ in age_groups[:-1]]
    if conditions:
        groups = np.select(conditions, labels, default=age_groups[-1][0]).astype(object)
    else:
        groups = np.full(len(ages), age_groups[-1][0], dtype=object)
    groups[(ages.isna() | (ages < 0)).to_numpy()] = None
    return pd.Series(groups, index=ages.index, name='AgeGroup', dtype=object)


class DemographicAggregationPipeline:
    """Totals quantity and spend per age band."""

    def __init__(self, age_groups: Sequence[Tuple[str, float]] = DEFAULT_AGE_GROUPS):
        """
        Parameters
        ----------
        age_groups : sequence of (label, upper bound)
            Bands checked in order; the last one catches everything above
        """
        self.age_groups = tuple(age_groups)

    def run(self, customers_df: pd.DataFrame, sales_df: pd.DataFrame) -> pd.DataFrame:
        """
        Parameters
        ----------
        customers_df : pd.DataFrame
            Customers with columns: CustomerID, Age
        sales_df : pd.DataFrame
            Cleaned sales

        Returns
        -------
        pd.DataFrame
            AgeGroup, TotalQuantity, TotalSpending ordered by
            TotalSpending descending
        """
        validate_columns(customers_df, ['CustomerID', 'Age'], 'Customers')
        validate_columns(sales_df, SALES_COLUMNS, 'Sales')

        logger.info("Stage 3: Demographic Aggregation")

        customers = customers_df[['CustomerID', 'Age']].copy()
        customers['AgeGroup'] = assign_age_groups(customers['Age'], self.age_groups)

        unbanded = customers['AgeGroup'].isna()
        if unbanded.any():
            logger.warning(f"Excluding {int(unbanded.sum()):,} customers with missing or negative age")
            customers = customers[~unbanded]

        sales = add_sale_value(sales_df).merge(customers, on='CustomerID', how='inner')

        summary = sales.groupby('AgeGroup').agg(
            TotalQuantity=('QuantityPurchased', 'sum'),
            TotalSpending=('SaleValue', 'sum')
        ).reset_index()

        summary = summary.sort_values(
            ['TotalSpending', 'AgeGroup'], ascending=[False, True], kind='mergesort'
        ).reset_index(drop=True)

        logger.info(f"Age groups with sales: {len(summary)}")

        return summary
