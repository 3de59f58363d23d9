"""
Report Configuration
====================
Paths, classification thresholds and output options for the reporting
pipeline.
"""

import math
from dataclasses import dataclass, field
from typing import Optional, Tuple


# (label, inclusive upper age bound), checked in order
DEFAULT_AGE_GROUPS: Tuple[Tuple[str, float], ...] = (
    ('Teen', 18),
    ('Young Adult', 35),
    ('Adult', 55),
    ('Senior', math.inf),
)

# (label, inclusive lower spend bound), checked in order
DEFAULT_SPEND_SEGMENTS: Tuple[Tuple[str, float], ...] = (
    ('High Spender', 10000),
    ('Medium Spender', 5000),
    ('Low Spender', 1000),
    ('Occasional Buyer', -math.inf),
)

OUTPUT_FORMATS = ('csv', 'parquet')


@dataclass
class ReportConfig:
    """Reporting pipeline configuration."""
    # Paths
    data_dir: str = 'data/raw'
    output_dir: str = 'data/reports'
    customers_file: str = 'customers.csv'
    products_file: str = 'products.csv'
    sales_file: str = 'sales.csv'

    # Cleaning
    location_sentinel: str = 'BLANK'

    # Classification
    age_groups: Tuple[Tuple[str, float], ...] = field(default=DEFAULT_AGE_GROUPS)
    spend_segments: Tuple[Tuple[str, float], ...] = field(default=DEFAULT_SPEND_SEGMENTS)
    top_n_per_segment: int = 3

    # Output
    output_format: str = 'csv'

    def __post_init__(self):
        if self.output_format not in OUTPUT_FORMATS:
            raise ValueError(
                f"Unknown output format: {self.output_format} "
                f"(expected one of {', '.join(OUTPUT_FORMATS)})"
            )
        if self.top_n_per_segment < 1:
            raise ValueError(f"top_n_per_segment must be >= 1, got {self.top_n_per_segment}")

    def get_age_group(self, age: float) -> Optional[str]:
        """Get age group label for a single age (None if age is missing or negative)."""
        if age is None or (isinstance(age, float) and math.isnan(age)) or age < 0:
            return None
        for label, upper in self.age_groups:
            if age <= upper:
                return label
        return self.age_groups[-1][0]

    def get_segment(self, total_spent: float) -> str:
        """Get spend segment label for a customer's total spend."""
        for label, lower in self.spend_segments:
            if total_spent >= lower:
                return label
        return self.spend_segments[-1][0]
