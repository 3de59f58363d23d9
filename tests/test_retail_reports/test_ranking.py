"""
Tests for Window Ranking
========================
"""

import pytest
import pandas as pd
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from src.retail_reports.ranking import row_number, top_n


@pytest.fixture
def rows():
    return pd.DataFrame({
        'Group': ['a', 'b', 'a', 'b', 'a'],
        'Id': [5, 4, 3, 2, 1],
        'Value': [10, 20, 30, 20, 10],
    })


class TestRowNumber:

    def test_partitioned_ranks(self, rows):
        ranked = row_number(rows, 'Value', ascending=False, partition_by='Group')

        assert ranked['Group'].tolist() == ['a', 'a', 'a', 'b', 'b']
        assert ranked['Rank'].tolist() == [1, 2, 3, 1, 2]
        assert ranked.iloc[0]['Id'] == 3

    def test_ties_keep_input_order(self, rows):
        """Test tied rows without a tie breaker keep their input order."""
        ranked = row_number(rows, 'Value', ascending=False, partition_by='Group')
        tied = ranked[ranked['Group'] == 'a']['Id'].tolist()
        assert tied == [3, 5, 1]

    def test_tie_breaker(self, rows):
        ranked = row_number(rows, 'Value', ascending=False, partition_by='Group', tie_breaker='Id')
        assert ranked[ranked['Group'] == 'a']['Id'].tolist() == [3, 1, 5]
        assert ranked[ranked['Group'] == 'b']['Id'].tolist() == [2, 4]

    def test_no_partition(self, rows):
        ranked = row_number(rows, ['Value', 'Id'], ascending=[True, True], rank_column='Pos')
        assert ranked['Pos'].tolist() == [1, 2, 3, 4, 5]
        assert ranked['Id'].tolist() == [1, 5, 2, 4, 3]

    def test_input_unchanged(self, rows):
        before = rows.copy()
        row_number(rows, 'Value', partition_by='Group')
        pd.testing.assert_frame_equal(rows, before)

    def test_ascending_length_mismatch(self, rows):
        with pytest.raises(ValueError):
            row_number(rows, ['Value', 'Id'], ascending=[True])

    def test_empty_frame(self, rows):
        ranked = row_number(rows.head(0), 'Value', partition_by='Group')
        assert len(ranked) == 0
        assert 'Rank' in ranked.columns


class TestTopN:

    def test_keeps_first_n_per_partition(self, rows):
        ranked = row_number(rows, 'Value', ascending=False, partition_by='Group', tie_breaker='Id')
        kept = top_n(ranked, 2)

        assert len(kept) == 4
        assert (kept['Rank'] <= 2).all()
