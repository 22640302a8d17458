"""Derived efficiency metrics computed from summed totals.

Every ratio returns 0.0 when its denominator is zero (or negative), never NaN
or infinity, so callers can sort and format the result directly.
"""


def safe_ratio(num: float, den: float, scale: float = 1.0) -> float:
    if den <= 0:
        return 0.0
    return num / den * scale


def cpl(spend: float, leads: float) -> float:
    """Cost per lead."""
    return safe_ratio(spend, leads)


def ctr(clicks: float, impressions: float) -> float:
    """Click-through rate in percent."""
    return safe_ratio(clicks, impressions, 100)


def cpm(spend: float, impressions: float) -> float:
    """Cost per thousand impressions."""
    return safe_ratio(spend, impressions, 1000)


def cpc(spend: float, clicks: float) -> float:
    """Cost per click."""
    return safe_ratio(spend, clicks)


def frequency(impressions: float, reach: float) -> float:
    """Average impressions per reached user."""
    return safe_ratio(impressions, reach)


def roas(revenue: float, spend: float) -> float:
    """Return on ad spend."""
    return safe_ratio(revenue, spend)


def cost_per_purchase(spend: float, purchases: float) -> float:
    return safe_ratio(spend, purchases)


def conversion_rate(conversions: float, clicks: float) -> float:
    """Conversions per click, in percent."""
    return safe_ratio(conversions, clicks, 100)


def delta_pct(current: float, previous: float) -> float:
    """Period-over-period change in percent; 0.0 when previous is 0."""
    if previous == 0:
        return 0.0
    return (current - previous) / previous * 100


# Objective keywords (pt-BR and en) mapped to the volume that counts as the
# objective's result. Checked in order.
OBJECTIVE_RESULTS: list[tuple[tuple[str, ...], str]] = [
    (("venda", "conve", "sales"), "purchases"),
    (("cadastro", "lead"), "leads"),
    (("trafego", "tráfego", "traffic", "clique"), "clicks"),
    (("engaja", "mensag", "message"), "messages"),
]


def primary_result(
    objective: str | None,
    purchases: float,
    leads: float,
    clicks: float,
    messages: float,
) -> float:
    """Volume that counts as a "result" for an objective.

    Without an objective, purchases win over leads. Message objectives fall
    back to clicks when no conversation started; unknown objectives use leads,
    then clicks.
    """
    if objective is None:
        return purchases if purchases > 0 else leads

    lowered = objective.lower()
    volumes = {
        "purchases": purchases,
        "leads": leads,
        "clicks": clicks,
        "messages": messages if messages > 0 else clicks,
    }
    for keywords, result in OBJECTIVE_RESULTS:
        if any(k in lowered for k in keywords):
            return volumes[result]
    return leads if leads > 0 else clicks


def cost_per_result(
    spend: float,
    purchases: float,
    leads: float,
    clicks: float = 0.0,
    messages: float = 0.0,
    objective: str | None = None,
) -> float:
    """Spend divided by the objective's primary result."""
    return safe_ratio(
        spend, primary_result(objective, purchases, leads, clicks, messages)
    )
