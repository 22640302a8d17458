"""Tests for ranking, filtering and age-bin ordering."""

from collections.abc import Callable

import polars as pl
import pytest

from adrollup.analytics import (
    AggregatedGroup,
    MetricTotals,
    build_hierarchy,
    rank,
    sort_age_bins,
)
from adrollup.exceptions import UnknownMetricError


def group(key: str, spend: float, leads: float = 0.0, **attributes: str) -> AggregatedGroup:
    return AggregatedGroup(
        key=key,
        totals=MetricTotals(spend=spend, leads=leads, count=1),
        attributes=dict(attributes),
    )


@pytest.fixture
def groups() -> list[AggregatedGroup]:
    return [
        group("first", 50.0, leads=5, objective="Vendas", name="Promo Verão"),
        group("second", 100.0, leads=4, objective="Tráfego", name="Institucional"),
        group("third", 50.0, leads=10, objective="Vendas", name="Promo Inverno"),
        group("fourth", 0.0, objective="Vendas", name="Pausado"),
        group("fifth", 50.0, leads=1, objective="Tráfego", name="Outro"),
    ]


class TestSorting:
    """Sorting and tie-breaking."""

    def test_descending_ties_keep_input_order(self, groups: list[AggregatedGroup]) -> None:
        ranked = rank(groups, "spend", descending=True)
        assert [g.key for g in ranked] == ["second", "first", "third", "fifth", "fourth"]

    def test_ascending_ties_keep_input_order(self, groups: list[AggregatedGroup]) -> None:
        ranked = rank(groups, "spend", descending=False)
        assert [g.key for g in ranked] == ["fourth", "first", "third", "fifth", "second"]

    def test_derived_metric(self, groups: list[AggregatedGroup]) -> None:
        ranked = rank(groups, "cpl", descending=False, nonzero_spend=True)
        # cpl: first 10, second 25, third 5, fifth 50
        assert [g.key for g in ranked] == ["third", "first", "second", "fifth"]

    def test_top_n(self, groups: list[AggregatedGroup]) -> None:
        assert [g.key for g in rank(groups, "spend", top_n=2)] == ["second", "first"]

    def test_input_not_modified(self, groups: list[AggregatedGroup]) -> None:
        before = [g.key for g in groups]
        rank(groups, "spend")
        assert [g.key for g in groups] == before

    def test_unknown_metric(self, groups: list[AggregatedGroup]) -> None:
        with pytest.raises(UnknownMetricError):
            rank(groups, "profit")

    def test_unknown_metric_on_empty_input(self) -> None:
        with pytest.raises(UnknownMetricError):
            rank([], "profit")


class TestFilters:
    """Secondary predicates."""

    def test_search_is_case_insensitive(self, groups: list[AggregatedGroup]) -> None:
        ranked = rank(groups, "spend", search="promo")
        assert [g.key for g in ranked] == ["first", "third"]

    def test_search_other_fields(self, groups: list[AggregatedGroup]) -> None:
        ranked = rank(groups, "spend", search="tráfego", search_fields=("objective",))
        assert [g.key for g in ranked] == ["second", "fifth"]

    def test_category(self, groups: list[AggregatedGroup]) -> None:
        ranked = rank(groups, "spend", category=("objective", "Vendas"))
        assert [g.key for g in ranked] == ["first", "third", "fourth"]

    def test_nonzero_spend(self, groups: list[AggregatedGroup]) -> None:
        ranked = rank(groups, "spend", nonzero_spend=True)
        assert "fourth" not in [g.key for g in ranked]


class TestHierarchyRanking:
    """Ranking hierarchy nodes."""

    @pytest.fixture
    def roots(self, make_frame: Callable[..., pl.DataFrame]):
        df = make_frame(
            [
                {
                    "campaign_name": "Inverno",
                    "adset_name": "S1",
                    "ad_name": "Casaco",
                    "valor_gasto": 10,
                },
                {
                    "campaign_name": "Inverno",
                    "adset_name": "S2",
                    "ad_name": "Bota",
                    "valor_gasto": 30,
                },
                {
                    "campaign_name": "Verão",
                    "adset_name": "S1",
                    "ad_name": "Biquini",
                    "valor_gasto": 50,
                },
            ]
        )
        return build_hierarchy(df)

    def test_search_matches_descendant(self, roots) -> None:
        ranked = rank(roots, "spend", search="bota")
        assert [n.name for n in ranked] == ["Inverno"]

    def test_recursive_sorts_children(self, roots) -> None:
        ranked = rank(roots, "spend", recursive=True)

        assert [n.name for n in ranked] == ["Verão", "Inverno"]
        assert [s.name for s in ranked[1].children] == ["S2", "S1"]
        # The original tree keeps its order
        assert [s.name for s in roots[0].children] == ["S1", "S2"]


class TestSortAgeBins:
    """Tests for sort_age_bins()."""

    def test_by_lower_bound(self) -> None:
        bins = [group(k, 1.0) for k in ["45+", "Desconhecido", "18-24", "25-34", "65+"]]
        assert [g.key for g in sort_age_bins(bins)] == [
            "18-24",
            "25-34",
            "45+",
            "65+",
            "Desconhecido",
        ]
