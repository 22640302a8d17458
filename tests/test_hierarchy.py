"""Tests for the campaign -> ad set -> ad tree."""

from collections.abc import Callable

import polars as pl
import pytest

from adrollup.analytics import (
    HierarchyNode,
    MetricTotals,
    build_hierarchy,
    flatten_hierarchy,
    frame_totals,
)


@pytest.fixture
def tree_df(make_frame: Callable[..., pl.DataFrame]) -> pl.DataFrame:
    return make_frame(
        [
            {
                "campaign_name": "Camp 1",
                "adset_name": "Set A",
                "ad_id": "a1",
                "ad_name": "Ad 1",
                "valor_gasto": 10,
                "impressoes": 100,
                "msgs_iniciadas": 1,
                "ad_image_url": "http://img/1.png",
            },
            {
                "campaign_name": "Camp 1",
                "adset_name": "Set A",
                "ad_id": "a1",
                "ad_name": "Ad 1",
                "valor_gasto": 5,
                "impressoes": 50,
            },
            {
                "campaign_name": "Camp 1",
                "adset_name": "Set B",
                "ad_id": "a2",
                "ad_name": "Ad 2",
                "valor_gasto": 0,
            },
            {
                "campaign_name": "Camp 2",
                "adset_name": "Set A",
                "ad_id": "a3",
                "ad_name": "Ad 1",
                "valor_gasto": 20,
                "msgs_iniciadas": 4,
            },
        ]
    )


def _all_nodes(roots: list[HierarchyNode]) -> list[HierarchyNode]:
    return [node for root in roots for node in root.walk()]


class TestBuildHierarchy:
    """Tests for build_hierarchy()."""

    def test_structure(self, tree_df: pl.DataFrame) -> None:
        roots = build_hierarchy(tree_df)

        assert [c.name for c in roots] == ["Camp 1", "Camp 2"]
        assert [s.name for s in roots[0].children] == ["Set A", "Set B"]
        assert [s.name for s in roots[1].children] == ["Set A"]

    def test_one_leaf_per_ad(self, tree_df: pl.DataFrame) -> None:
        """Repeated rows of one ad collapse into a single leaf."""
        set_a = build_hierarchy(tree_df)[0].children[0]

        assert len(set_a.children) == 1
        leaf = set_a.children[0]
        assert leaf.level == "ad"
        assert leaf.spend == 15.0
        assert leaf.impressions == 150.0
        assert leaf.count == 2
        assert leaf.image_url == "http://img/1.png"

    def test_same_ad_set_name_in_two_campaigns(self, tree_df: pl.DataFrame) -> None:
        roots = build_hierarchy(tree_df)
        assert roots[0].children[0].id != roots[1].children[0].id

    def test_parent_totals_equal_sum_of_children(self, tree_df: pl.DataFrame) -> None:
        for node in _all_nodes(build_hierarchy(tree_df)):
            if node.children:
                assert node.totals == MetricTotals.total(c.totals for c in node.children)

    def test_root_totals_equal_frame(self, tree_df: pl.DataFrame) -> None:
        roots = build_hierarchy(tree_df)
        assert MetricTotals.total(r.totals for r in roots) == frame_totals(tree_df)

    def test_no_empty_nodes(self, tree_df: pl.DataFrame) -> None:
        for node in _all_nodes(build_hierarchy(tree_df)):
            assert node.count > 0
            if node.level != "ad":
                assert node.children

    def test_status_follows_spend(self, tree_df: pl.DataFrame) -> None:
        camp_1 = build_hierarchy(tree_df)[0]
        assert camp_1.status == "active"
        assert camp_1.children[1].status == "inactive"

    def test_derived_metrics_on_nodes(self, tree_df: pl.DataFrame) -> None:
        camp_2 = build_hierarchy(tree_df)[1]
        assert camp_2.cpl == 5.0

    def test_empty_frame(self, make_frame: Callable[..., pl.DataFrame]) -> None:
        assert build_hierarchy(make_frame([])) == []

    def test_to_dict(self, tree_df: pl.DataFrame) -> None:
        data = build_hierarchy(tree_df)[0].to_dict()

        assert data["level"] == "campaign"
        assert data["spend"] == 15.0
        leaf = data["children"][0]["children"][0]
        assert leaf["image_url"] == "http://img/1.png"
        assert "children" not in leaf


class TestFlattenHierarchy:
    """Tests for flatten_hierarchy()."""

    def test_full_tree(self, tree_df: pl.DataFrame) -> None:
        rows = flatten_hierarchy(build_hierarchy(tree_df))

        assert [(depth, node.level) for depth, node in rows] == [
            (0, "campaign"),
            (1, "adset"),
            (2, "ad"),
            (1, "adset"),
            (2, "ad"),
            (0, "campaign"),
            (1, "adset"),
            (2, "ad"),
        ]

    def test_only_expanded_nodes_show_children(self, tree_df: pl.DataFrame) -> None:
        rows = flatten_hierarchy(build_hierarchy(tree_df), expanded={"Camp 2"})
        assert [node.name for _, node in rows] == ["Camp 1", "Camp 2", "Set A"]
