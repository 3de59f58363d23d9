"""
Stage 6: Location Aggregation
=============================
Sales value per customer location, and the best and worst selling
product in each location.

Rows with a null or empty Location are excluded. The BLANK sentinel
written during cleaning is a regular location and is kept.
"""

import logging
import pandas as pd
from typing import Dict

from .ranking import row_number
from .schema import SALES_COLUMNS, validate_columns, add_sale_value

logger = logging.getLogger(__name__)


def _sales_with_location(customers_df: pd.DataFrame, sales_df: pd.DataFrame) -> pd.DataFrame:
    """Sales joined to customer Location, dropping null/empty locations."""
    validate_columns(customers_df, ['CustomerID', 'Location'], 'Customers')
    validate_columns(sales_df, SALES_COLUMNS, 'Sales')

    sales = add_sale_value(sales_df).merge(
        customers_df[['CustomerID', 'Location']], on='CustomerID', how='inner'
    )
    located = sales['Location'].notna() & (sales['Location'] != '')
    return sales[located]


def sales_by_location(customers_df: pd.DataFrame, sales_df: pd.DataFrame) -> pd.DataFrame:
    """Location, TotalSales ordered by TotalSales descending."""
    sales = _sales_with_location(customers_df, sales_df)
    totals = sales.groupby('Location').agg(TotalSales=('SaleValue', 'sum')).reset_index()
    return totals.sort_values(
        ['TotalSales', 'Location'], ascending=[False, True], kind='mergesort'
    ).reset_index(drop=True)


def product_extremes_by_location(customers_df: pd.DataFrame, sales_df: pd.DataFrame) -> pd.DataFrame:
    """
    Highest and lowest selling product per location.

    Sales value is aggregated per (Location, ProductID). Each location
    contributes one Highest row and one Lowest row (ties: lowest ProductID);
    the two sets are concatenated without deduplication, so a location
    with a single product appears twice.

    Returns
    -------
    pd.DataFrame
        SalesRank, Location, ProductID, TotalSales, CustomerIDs
    """
    sales = _sales_with_location(customers_df, sales_df)

    product_sales = sales.groupby(['Location', 'ProductID']).agg(
        TotalSales=('SaleValue', 'sum'),
        CustomerIDs=('CustomerID', lambda ids: ','.join(str(i) for i in sorted(ids.unique())))
    ).reset_index()

    tagged = []
    for tag, ascending in (('Highest', False), ('Lowest', True)):
        ranked = row_number(
            product_sales,
            order_by='TotalSales',
            ascending=ascending,
            partition_by='Location',
            tie_breaker='ProductID',
            rank_column='LocationRank'
        )
        picked = ranked[ranked['LocationRank'] == 1].drop(columns='LocationRank')
        picked.insert(0, 'SalesRank', tag)
        tagged.append(picked)

    columns = ['SalesRank', 'Location', 'ProductID', 'TotalSales', 'CustomerIDs']
    return pd.concat(tagged, ignore_index=True)[columns]


class LocationSalesPipeline:
    """Computes the location reports."""

    def run(self, customers_df: pd.DataFrame, sales_df: pd.DataFrame) -> Dict[str, pd.DataFrame]:
        """
        Returns
        -------
        dict
            sales_by_location, product_extremes_by_location
        """
        logger.info("Stage 6: Location Aggregation")

        totals = sales_by_location(customers_df, sales_df)
        extremes = product_extremes_by_location(customers_df, sales_df)

        logger.info(f"Locations with sales: {len(totals):,}")

        return {
            'sales_by_location': totals,
            'product_extremes_by_location': extremes
        }
