"""Tests for the harm_ranking nodes: aggregation, shares and top-k."""

import numpy as np
import pandas as pd
import pytest

from stormharm.pipelines.harm_ranking.nodes import (
    MEASURES,
    add_shares,
    aggregate_by_year,
    aggregate_overall,
    rank_by_year,
    rank_overall,
    worst_categories,
    worst_categories_by_year,
)


# ── Test 1: Aggregation ──────────────────────────────────────────
class TestAggregation:
    """Per-category and per-category-year sums."""

    def test_overall_sums(self, tidy_events):
        agg = aggregate_overall(tidy_events).set_index("category")
        assert agg.loc["Tornado", "count"] == 3
        assert agg.loc["Tornado", "injuries"] == 18
        assert agg.loc["Flood", "property_damage"] == pytest.approx(5.1e8)
        assert agg.loc["Drought", "crop_damage"] == pytest.approx(3e8)

    def test_by_year_keys(self, tidy_events):
        agg = aggregate_by_year(tidy_events)
        assert list(agg.columns[:2]) == ["year", "category"]
        keys = list(zip(agg["year"], agg["category"]))
        assert keys == [
            (2008, "Drought"),
            (2008, "Flood"),
            (2008, "Tornado"),
            (2009, "Excessive Heat"),
            (2009, "Flood"),
            (2009, "Tornado"),
        ]

    def test_by_year_sums(self, tidy_events):
        agg = aggregate_by_year(tidy_events).set_index(["year", "category"])
        assert agg.loc[(2008, "Tornado"), "count"] == 2
        assert agg.loc[(2008, "Tornado"), "injuries"] == 15


# ── Test 2: Shares ───────────────────────────────────────────────
class TestShares:
    """Shares of the context total for each measure."""

    @pytest.mark.parametrize("measure", ["count", *MEASURES])
    def test_overall_shares_sum_to_one(self, tidy_events, measure):
        agg = aggregate_overall(tidy_events)
        assert np.isclose(agg[f"{measure}_share"].sum(), 1.0)

    @pytest.mark.parametrize("measure", ["count", *MEASURES])
    def test_yearly_shares_sum_to_one(self, tidy_events, measure):
        agg = aggregate_by_year(tidy_events)
        totals = agg.groupby("year")[f"{measure}_share"].sum()
        assert np.allclose(totals.to_numpy(), 1.0)

    def test_zero_total_gives_zero_share(self, tidy_events):
        agg = aggregate_overall(tidy_events.assign(fatalities=0))
        assert (agg["fatalities_share"] == 0.0).all()

    def test_add_shares_does_not_mutate(self, tidy_events):
        agg = aggregate_overall(tidy_events)[["category", "count", *MEASURES]]
        before = agg.copy()
        add_shares(agg)
        pd.testing.assert_frame_equal(agg, before)


# ── Test 3: Top-k rankings ───────────────────────────────────────
class TestRankOverall:
    """Top-k per measure across all years."""

    def test_size_at_most_k(self, tidy_events):
        rankings = rank_overall(aggregate_overall(tidy_events), 5)
        # only 4 categories exist
        assert rankings.groupby("measure").size().max() == 4

        rankings = rank_overall(aggregate_overall(tidy_events), 2)
        assert (rankings.groupby("measure").size() == 2).all()

    def test_sorted_descending_by_raw_value(self, tidy_events):
        rankings = rank_overall(aggregate_overall(tidy_events), 5)
        for _, group in rankings.groupby("measure"):
            values = group.sort_values("rank")["value"].to_numpy()
            assert (np.diff(values) <= 0).all()

    def test_injury_order(self, tidy_events):
        rankings = rank_overall(aggregate_overall(tidy_events), 2)
        injuries = rankings[rankings["measure"] == "injuries"]
        assert injuries["category"].tolist() == ["Excessive Heat", "Tornado"]
        assert injuries["rank"].tolist() == [1, 2]

    def test_ties_keep_input_order(self, tidy_events):
        rankings = rank_overall(aggregate_overall(tidy_events), 4)
        prop = rankings[rankings["measure"] == "property_damage"]
        # Drought and Excessive Heat both have $0; category order is kept
        assert prop["category"].tolist()[-2:] == ["Drought", "Excessive Heat"]

    def test_share_column_matches_aggregate(self, tidy_events):
        agg = aggregate_overall(tidy_events).set_index("category")
        rankings = rank_overall(agg.reset_index(), 1)
        top = rankings[rankings["measure"] == "crop_damage"].iloc[0]
        assert top["share"] == pytest.approx(agg.loc[top["category"], "crop_damage_share"])

    def test_invalid_k(self, tidy_events):
        with pytest.raises(ValueError, match="at least 1"):
            rank_overall(aggregate_overall(tidy_events), 0)


class TestRankByYear:
    """Top-k per measure within each year."""

    def test_at_most_k_per_year_and_measure(self, tidy_events):
        rankings = rank_by_year(aggregate_by_year(tidy_events), 2)
        sizes = rankings.groupby(["year", "measure"]).size()
        assert (sizes <= 2).all()
        assert set(rankings["year"]) == {2008, 2009}

    def test_yearly_injury_order(self, tidy_events):
        rankings = rank_by_year(aggregate_by_year(tidy_events), 2)
        top = rankings[(rankings["year"] == 2008) & (rankings["measure"] == "injuries")]
        assert top["category"].tolist() == ["Tornado", "Drought"]

    def test_empty_input(self, tidy_events):
        empty = aggregate_by_year(tidy_events).iloc[0:0]
        rankings = rank_by_year(empty, 2)
        assert rankings.empty
        assert list(rankings.columns) == ["year", "measure", "rank", "category", "value", "share"]


# ── Test 4: Worst-category unions ────────────────────────────────
class TestWorstCategories:
    """Health and economy unions of the top-k rankings."""

    def test_economy_uses_crop_ranking(self, tidy_events):
        worst = worst_categories(rank_overall(aggregate_overall(tidy_events), 1))
        # top property = Flood, top crop = Drought
        assert worst["economy"] == ["Drought", "Flood"]

    def test_health_union(self, tidy_events):
        worst = worst_categories(rank_overall(aggregate_overall(tidy_events), 2))
        assert worst["health"] == ["Excessive Heat", "Tornado"]

    def test_by_year_keys_are_strings(self, tidy_events):
        worst = worst_categories_by_year(rank_by_year(aggregate_by_year(tidy_events), 1))
        assert set(worst) == {"2008", "2009"}
        assert worst["2009"]["health"] == ["Excessive Heat"]
        assert worst["2008"]["economy"] == ["Drought", "Flood"]
