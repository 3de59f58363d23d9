"""
Tests for Report Configuration
==============================
"""

import pytest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from src.retail_reports.config import ReportConfig


class TestReportConfig:

    def test_defaults(self):
        config = ReportConfig()
        assert config.location_sentinel == 'BLANK'
        assert config.top_n_per_segment == 3
        assert config.output_format == 'csv'
        assert [label for label, _ in config.age_groups] == ['Teen', 'Young Adult', 'Adult', 'Senior']

    @pytest.mark.parametrize('age,expected', [
        (0, 'Teen'),
        (18, 'Teen'),
        (19, 'Young Adult'),
        (35, 'Young Adult'),
        (36, 'Adult'),
        (55, 'Adult'),
        (56, 'Senior'),
        (99, 'Senior'),
    ])
    def test_get_age_group(self, age, expected):
        assert ReportConfig().get_age_group(age) == expected

    def test_get_age_group_missing(self):
        assert ReportConfig().get_age_group(None) is None
        assert ReportConfig().get_age_group(float('nan')) is None

    def test_get_age_group_negative(self):
        assert ReportConfig().get_age_group(-1) is None
        assert ReportConfig().get_age_group(0) == 'Teen'

    @pytest.mark.parametrize('spend,expected', [
        (25000, 'High Spender'),
        (10000, 'High Spender'),
        (9999.99, 'Medium Spender'),
        (5000, 'Medium Spender'),
        (4999, 'Low Spender'),
        (1000, 'Low Spender'),
        (999, 'Occasional Buyer'),
        (0, 'Occasional Buyer'),
    ])
    def test_get_segment(self, spend, expected):
        assert ReportConfig().get_segment(spend) == expected

    def test_invalid_output_format(self):
        with pytest.raises(ValueError):
            ReportConfig(output_format='xlsx')

    def test_invalid_top_n(self):
        with pytest.raises(ValueError):
            ReportConfig(top_n_per_segment=0)
