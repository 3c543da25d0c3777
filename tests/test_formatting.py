"""
Unit tests for promo_engine/formatting.py
"""

import pytest

from promo_engine.formatting import abbreviate_amount, format_metric_value, format_percent, ordinal
from promo_engine.models import CampaignGoal


class TestFormatting:

    @pytest.mark.parametrize(
        "value,expected",
        [
            (0, "0"),
            (950, "950"),
            (999.4, "999"),
            (999.5, "1k"),
            (1000, "1k"),
            (142000, "142k"),
            (999_499, "999k"),
            (999_950, "1M"),
            (1_000_000, "1M"),
            (1_250_000, "1.3M"),
            (-950, "-950"),
            (-142000, "-142k"),
            (-0.4, "0"),
            (-1_250_000, "-1.3M"),
        ],
    )
    def test_abbreviate_amount(self, value, expected):
        assert abbreviate_amount(value) == expected

    @pytest.mark.parametrize(
        "value,expected",
        [
            (91, "91%"),
            (91.0, "91%"),
            (87.5, "87.5%"),
            (87.55, "87.6%"),
            (99.96, "100%"),
            (0, "0%"),
            (-70, "-70%"),
            (-12.25, "-12.3%"),
        ],
    )
    def test_format_percent(self, value, expected):
        assert format_percent(value) == expected

    def test_format_metric_value_by_goal(self):
        assert format_metric_value(142000, CampaignGoal.REVENUE) == "142k"
        assert format_metric_value(87.5, "redemption_rate") == "87.5%"
        assert format_metric_value(91, CampaignGoal.ROI) == "91%"

    @pytest.mark.parametrize(
        "n,expected",
        [(1, "1st"), (2, "2nd"), (3, "3rd"), (4, "4th"), (11, "11th"), (12, "12th"), (13, "13th"), (21, "21st"), (22, "22nd")],
    )
    def test_ordinal(self, n, expected):
        assert ordinal(n) == expected
