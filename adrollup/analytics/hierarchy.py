"""Campaign -> ad set -> ad tree aggregation."""

import logging
from collections.abc import Collection, Iterable

import polars as pl

from .expressions import first_value_expr, totals_expr
from .grouping import ad_identity_expr
from .models import HierarchyNode, MetricTotals

logger = logging.getLogger(__name__)

_AD_KEY = "_ad_key"


def adset_node_id(campaign_name: str, adset_name: str) -> str:
    return f"{campaign_name}::{adset_name}"


def build_hierarchy(df: pl.DataFrame) -> list[HierarchyNode]:
    """Build the campaign tree in first-seen order.

    Campaigns are keyed by name and ad sets by (campaign, ad set name). Each
    unique ad (ad id, else unique id, else ad name) within an ad set is one
    leaf summing all of its rows. Parent totals are the sum of their
    children, so every node in the tree has at least one row behind it.
    """
    leaves = (
        df.with_columns(ad_identity_expr().alias(_AD_KEY))
        .group_by(["campaign_name", "adset_name", _AD_KEY], maintain_order=True)
        .agg(
            [
                *totals_expr(),
                first_value_expr("ad_name"),
                first_value_expr("image_url"),
                first_value_expr("post_link"),
                first_value_expr("objective"),
            ]
        )
    )

    campaigns: dict[str, HierarchyNode] = {}
    adsets: dict[tuple[str, str], HierarchyNode] = {}

    for row in leaves.iter_rows(named=True):
        campaign_name = row["campaign_name"]
        adset_name = row["adset_name"]
        objective = row["objective"] or None

        campaign = campaigns.get(campaign_name)
        if campaign is None:
            campaign = HierarchyNode(
                id=campaign_name,
                name=campaign_name,
                level="campaign",
                objective=objective,
            )
            campaigns[campaign_name] = campaign

        adset = adsets.get((campaign_name, adset_name))
        if adset is None:
            adset = HierarchyNode(
                id=adset_node_id(campaign_name, adset_name),
                name=adset_name,
                level="adset",
                objective=objective,
            )
            adsets[(campaign_name, adset_name)] = adset
            campaign.children.append(adset)

        adset.children.append(
            HierarchyNode(
                id=row[_AD_KEY],
                name=row["ad_name"] or row[_AD_KEY],
                level="ad",
                totals=MetricTotals.from_mapping(row),
                image_url=row["image_url"],
                post_link=row["post_link"],
                objective=objective,
            )
        )

    # Roll up bottom-up from the attached children
    for adset in adsets.values():
        adset.totals = MetricTotals.total(c.totals for c in adset.children)
    for campaign in campaigns.values():
        campaign.totals = MetricTotals.total(c.totals for c in campaign.children)

    logger.debug(
        "Built hierarchy: %d campaigns, %d ad sets, %d ads",
        len(campaigns),
        len(adsets),
        len(leaves),
    )
    return list(campaigns.values())


def flatten_hierarchy(
    nodes: Iterable[HierarchyNode],
    expanded: Collection[str] | None = None,
    depth: int = 0,
) -> list[tuple[int, HierarchyNode]]:
    """Rows for a tree table as (depth, node), parents before children.

    With ``expanded`` given, only nodes whose id is in it show their
    children; otherwise the whole tree is listed.
    """
    rows: list[tuple[int, HierarchyNode]] = []
    for node in nodes:
        rows.append((depth, node))
        if node.children and (expanded is None or node.id in expanded):
            rows.extend(flatten_hierarchy(node.children, expanded, depth + 1))
    return rows
