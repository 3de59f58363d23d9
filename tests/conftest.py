"""
Pytest Configuration and Fixtures
==================================
Shared fixtures for retail report tests.
"""

import pytest
import pandas as pd
import numpy as np
from pathlib import Path
import tempfile
import shutil


LOCATIONS = ['East', 'West', 'North', 'South']
CATEGORIES = ['Electronics', 'Clothing', 'Home & Kitchen', 'Beauty & Health']


@pytest.fixture(scope="session")
def project_root():
    """Get project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture(scope="session")
def synthetic_tables():
    """Generate synthetic customers, products and sales for unit tests."""
    return generate_synthetic_tables()


@pytest.fixture(scope="session")
def customers_df(synthetic_tables):
    return synthetic_tables['customers']


@pytest.fixture(scope="session")
def products_df(synthetic_tables):
    return synthetic_tables['products']


@pytest.fixture(scope="session")
def sales_df(synthetic_tables):
    return synthetic_tables['sales']


def generate_synthetic_tables(
    n_customers: int = 40,
    n_products: int = 20,
    n_sales: int = 300,
    n_duplicates: int = 15
) -> dict:
    """
    Generate synthetic base tables.

    Sales include n_duplicates rows that repeat an earlier
    (ProductID, CustomerID, TransactionDate) with a higher TransactionID.
    Two customers have a blank location (one empty string, one missing).
    """
    np.random.seed(42)

    customers = pd.DataFrame({
        'CustomerID': np.arange(1, n_customers + 1),
        'Age': np.random.randint(12, 75, n_customers),
        'Gender': np.random.choice(['Male', 'Female', 'Other'], n_customers),
        'Location': np.random.choice(LOCATIONS, n_customers).astype(object),
        'JoinDate': [f'{(i % 28) + 1:02d}/01/20' for i in range(n_customers)],
    })
    customers.loc[0, 'Location'] = ''
    customers.loc[1, 'Location'] = None

    products = pd.DataFrame({
        'ProductID': np.arange(1, n_products + 1),
        'ProductName': [f'Product_{i}' for i in range(1, n_products + 1)],
        'Category': np.random.choice(CATEGORIES, n_products),
        'StockLevel': np.random.randint(0, 500, n_products),
        'Price': np.random.uniform(10, 500, n_products).round(2),
    })

    product_ids = np.random.randint(1, n_products + 1, n_sales)
    price_lookup = products.set_index('ProductID')['Price']
    sales = pd.DataFrame({
        'TransactionID': np.arange(1, n_sales + 1),
        'CustomerID': np.random.randint(1, n_customers + 1, n_sales),
        'ProductID': product_ids,
        'QuantityPurchased': np.random.randint(1, 10, n_sales),
        'TransactionDate': [f'{(i % 30) + 1:02d}/01/23' for i in range(n_sales)],
        'Price': price_lookup.loc[product_ids].to_numpy(),
    })

    duplicates = sales.head(n_duplicates).copy()
    duplicates['TransactionID'] = np.arange(n_sales + 1, n_sales + n_duplicates + 1)
    duplicates['QuantityPurchased'] = duplicates['QuantityPurchased'] + 1
    sales = pd.concat([sales, duplicates], ignore_index=True)

    return {'customers': customers, 'products': products, 'sales': sales}


def make_sales(rows) -> pd.DataFrame:
    """
    Build a sales frame from (TransactionID, CustomerID, ProductID,
    QuantityPurchased, Price) tuples; all rows share one TransactionDate
    unless the tuple carries a sixth element.
    """
    records = []
    for row in rows:
        tid, cust, prod, qty, price = row[:5]
        date = row[5] if len(row) > 5 else '01/01/23'
        records.append({
            'TransactionID': tid,
            'CustomerID': cust,
            'ProductID': prod,
            'QuantityPurchased': qty,
            'TransactionDate': date,
            'Price': price,
        })
    return pd.DataFrame(records)


@pytest.fixture(scope="session")
def sales_factory():
    """Factory building small hand-written sales frames."""
    return make_sales


@pytest.fixture(scope="function")
def temp_dir():
    """Create a temporary directory for test outputs."""
    tmp = tempfile.mkdtemp()
    yield Path(tmp)
    shutil.rmtree(tmp)


@pytest.fixture(scope="function")
def csv_data_dir(temp_dir, synthetic_tables):
    """Write the synthetic tables as CSVs into a temporary data directory."""
    data_dir = temp_dir / 'raw'
    data_dir.mkdir()
    synthetic_tables['customers'].to_csv(data_dir / 'customers.csv', index=False)
    synthetic_tables['products'].to_csv(data_dir / 'products.csv', index=False)
    synthetic_tables['sales'].to_csv(data_dir / 'sales.csv', index=False)
    return data_dir
