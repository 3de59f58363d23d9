"""
Stage 2: Product Insights
=========================
Product-level extremes over the cleaned tables:
1. Highest and lowest priced product
2. Highest and lowest quantity single transaction
3. Best-selling transaction per category

Ties are broken by the lowest ID so the output is deterministic.
"""

import logging
import pandas as pd
from typing import Dict

from .ranking import row_number
from .schema import PRODUCT_COLUMNS, SALES_COLUMNS, validate_columns, join_sales_products

logger = logging.getLogger(__name__)


def _extremes(
    df: pd.DataFrame,
    value_col: str,
    id_col: str,
    tag_col: str
) -> pd.DataFrame:
    """First row by value descending and by value ascending, tagged."""
    valid = df[df[value_col].notna()]
    highest = row_number(valid, value_col, ascending=False, tie_breaker=id_col).head(1).copy()
    lowest = row_number(valid, value_col, ascending=True, tie_breaker=id_col).head(1).copy()

    highest.insert(0, tag_col, 'Highest')
    lowest.insert(0, tag_col, 'Lowest')

    return pd.concat([highest, lowest], ignore_index=True).drop(columns='Rank')


def extreme_price_products(products_df: pd.DataFrame) -> pd.DataFrame:
    """The most and least expensive product (ties: lowest ProductID)."""
    validate_columns(products_df, PRODUCT_COLUMNS, 'Products')
    return _extremes(products_df, 'Price', 'ProductID', 'PriceRank')


def extreme_quantity_transactions(
    sales_df: pd.DataFrame,
    products_df: pd.DataFrame
) -> pd.DataFrame:
    """
    The single sales row with the highest and the lowest QuantityPurchased.

    Transaction level, not aggregated per product. Ties go to the lowest
    TransactionID.
    """
    validate_columns(sales_df, SALES_COLUMNS, 'Sales')
    validate_columns(products_df, PRODUCT_COLUMNS, 'Products')
    joined = join_sales_products(sales_df, products_df)
    return _extremes(joined, 'QuantityPurchased', 'TransactionID', 'QuantityRank')


def best_seller_per_category(
    sales_df: pd.DataFrame,
    products_df: pd.DataFrame
) -> pd.DataFrame:
    """Per category, the transaction with the highest QuantityPurchased."""
    validate_columns(sales_df, SALES_COLUMNS, 'Sales')
    validate_columns(products_df, PRODUCT_COLUMNS, 'Products')
    joined = join_sales_products(sales_df, products_df)

    ranked = row_number(
        joined,
        order_by='QuantityPurchased',
        ascending=False,
        partition_by='Category',
        tie_breaker='TransactionID',
        rank_column='CategoryRank'
    )
    best = ranked[ranked['CategoryRank'] == 1]

    columns = [
        'Category', 'ProductID', 'ProductName', 'TransactionID',
        'CustomerID', 'QuantityPurchased', 'TransactionDate', 'Price'
    ]
    return best[columns].reset_index(drop=True)


class ProductInsightPipeline:
    """Computes the product insight reports."""

    def run(
        self,
        sales_df: pd.DataFrame,
        products_df: pd.DataFrame
    ) -> Dict[str, pd.DataFrame]:
        """
        Parameters
        ----------
        sales_df : pd.DataFrame
            Cleaned sales
        products_df : pd.DataFrame
            Products

        Returns
        -------
        dict
            extreme_price_products, extreme_quantity_transactions,
            best_seller_per_category
        """
        logger.info("Stage 2: Product Insights")

        price_extremes = extreme_price_products(products_df)
        quantity_extremes = extreme_quantity_transactions(sales_df, products_df)
        best_sellers = best_seller_per_category(sales_df, products_df)

        logger.info(f"Best sellers found for {len(best_sellers):,} categories")

        return {
            'extreme_price_products': price_extremes,
            'extreme_quantity_transactions': quantity_extremes,
            'best_seller_per_category': best_sellers
        }
