"""
Stage 1: Data Cleaning
======================
Prepares the three base tables before any report runs:
1. Null Audit - Missing value counts for products and customers
2. Location Normalization - Blank/missing locations set to a sentinel
3. Sales Deduplication - One row per (product, customer, date)

Output: cleaned customers/products/sales plus two audit rows
"""

import logging
import pandas as pd
from typing import Dict, Iterable

from .schema import (
    CUSTOMER_COLUMNS, PRODUCT_COLUMNS, SALES_COLUMNS, DEDUP_KEY,
    validate_columns
)

logger = logging.getLogger(__name__)

PRODUCT_AUDIT_COLUMNS = ['Price', 'ProductName', 'Category', 'StockLevel']
CUSTOMER_AUDIT_COLUMNS = ['Age', 'Gender', 'Location', 'JoinDate']


def audit_missing(df: pd.DataFrame, columns: Iterable[str], table: str) -> pd.DataFrame:
    """
    Count missing values per column.

    Returns a single-row frame with one Missing<Column> count per audited
    column. Never raises on nulls; raises SchemaError if a column is absent.
    """
    columns = list(columns)
    validate_columns(df, columns, table)
    counts = {f'Missing{col}': int(df[col].isna().sum()) for col in columns}
    return pd.DataFrame([counts])


def audit_missing_products(products_df: pd.DataFrame) -> pd.DataFrame:
    """Missing value counts for Price, ProductName, Category and StockLevel."""
    return audit_missing(products_df, PRODUCT_AUDIT_COLUMNS, 'Products')


def audit_missing_customers(customers_df: pd.DataFrame) -> pd.DataFrame:
    """Missing value counts for Age, Gender, Location and JoinDate."""
    return audit_missing(customers_df, CUSTOMER_AUDIT_COLUMNS, 'Customers')


def normalize_locations(customers_df: pd.DataFrame, sentinel: str = 'BLANK') -> pd.DataFrame:
    """Replace null or empty-string Location values with the sentinel."""
    validate_columns(customers_df, ['Location'], 'Customers')
    customers = customers_df.copy()
    blank = customers['Location'].isna() | (customers['Location'] == '')
    customers['Location'] = customers['Location'].astype(object)
    customers.loc[blank, 'Location'] = sentinel
    return customers


def deduplicate_sales(sales_df: pd.DataFrame) -> pd.DataFrame:
    """
    Collapse duplicate sales to the row with the minimum TransactionID.

    Rows are duplicates when they share (ProductID, CustomerID,
    TransactionDate). Null key values group together. Rows without a
    TransactionID are never dropped.
    """
    validate_columns(sales_df, DEDUP_KEY + ['TransactionID'], 'Sales')
    ids = sales_df['TransactionID']
    keep_ids = sales_df.groupby(DEDUP_KEY, dropna=False)['TransactionID'].transform('min')
    keep = (ids == keep_ids) | ids.isna()
    return sales_df[keep].copy()


class DataCleaningPipeline:
    """
    Cleans the base tables.

    Steps:
    1. Null Audit: Missing counts for products and customers (no mutation)
    2. Location Normalization: Null/empty Location -> sentinel
    3. Sales Deduplication: Keep min TransactionID per duplicate group

    All steps work on copies; tables are only returned once every step has
    succeeded.
    """

    def __init__(self, location_sentinel: str = 'BLANK'):
        """
        Parameters
        ----------
        location_sentinel : str
            Value written into blank or missing customer locations
        """
        self.location_sentinel = location_sentinel

    def run(
        self,
        customers_df: pd.DataFrame,
        products_df: pd.DataFrame,
        sales_df: pd.DataFrame
    ) -> Dict[str, pd.DataFrame]:
        """
        Execute the cleaning stage.

        Parameters
        ----------
        customers_df : pd.DataFrame
            Customers with columns: CustomerID, Age, Gender, Location, JoinDate
        products_df : pd.DataFrame
            Products with columns: ProductID, ProductName, Category,
            StockLevel, Price
        sales_df : pd.DataFrame
            Sales with columns: TransactionID, CustomerID, ProductID,
            QuantityPurchased, TransactionDate, Price

        Returns
        -------
        dict
            customers, products, sales (cleaned) and the audit reports
            product_null_audit, customer_null_audit
        """
        validate_columns(customers_df, CUSTOMER_COLUMNS, 'Customers')
        validate_columns(products_df, PRODUCT_COLUMNS, 'Products')
        validate_columns(sales_df, SALES_COLUMNS, 'Sales')

        logger.info("Stage 1: Data Cleaning")

        # Step 1: Null audit
        product_audit = audit_missing_products(products_df)
        customer_audit = audit_missing_customers(customers_df)
        missing_products = int(product_audit.iloc[0].sum())
        if missing_products:
            logger.warning(f"Products have {missing_products:,} missing values: "
                           f"{product_audit.iloc[0].to_dict()}")
        logger.info(f"Customer missing values: {customer_audit.iloc[0].to_dict()}")

        # Step 2: Location normalization
        customers = normalize_locations(customers_df, self.location_sentinel)
        n_blank = int((customers['Location'] == self.location_sentinel).sum())
        logger.info(f"Locations set to '{self.location_sentinel}': {n_blank:,}")

        # Step 3: Deduplication
        sales = deduplicate_sales(sales_df)
        n_removed = len(sales_df) - len(sales)
        if n_removed:
            logger.warning(f"Removed {n_removed:,} duplicate sales "
                           f"({len(sales):,} of {len(sales_df):,} kept)")
        else:
            logger.info(f"No duplicate sales in {len(sales_df):,} rows")

        return {
            'customers': customers,
            'products': products_df.copy(),
            'sales': sales,
            'product_null_audit': product_audit,
            'customer_null_audit': customer_audit
        }
