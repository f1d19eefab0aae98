"""Categorical resolver: probability maps → display labels.

Probability maps are label -> 0..1 confidence mappings returned by the
prediction service. They are not required to sum to one; each entry is
treated independently when selecting the most likely label.
"""

from healthgest.constants import NOT_AVAILABLE, RISK_DISPLAY_THRESHOLD
from healthgest.schemas.dashboard import ProbabilityBar, ProbabilityPanel, ProfileItem
from healthgest.utils.formatters import format_camel_label, percent

# Delivery type labels; anything unmapped is "Unknown"
_TYPE_LABELS: dict[str, str] = {
    "FullTerm": "Matured",
    "Premature": "Premature",
    "MortalityRisk": "Mortality Risk",
}
# Labels shown upper-cased to flag urgency
_URGENT_TYPE_LABELS = frozenset({"Premature", "Mortality Risk"})

PROBABILITY_UNAVAILABLE = "Probability data is not available."


def pick_max(probabilities: dict[str, float] | None) -> tuple[str, float] | None:
    """Return the (label, probability) entry with the highest probability.

    Linear scan from ('', 0.0) that replaces only on a strictly greater value,
    so ties go to the first label in map order and a map with no positive
    probability keeps the empty label. Returns None for an empty or absent map.
    """
    if not probabilities:
        return None
    best: tuple[str, float] = ("", 0.0)
    for label, probability in probabilities.items():
        if probability > best[1]:
            best = (label, probability)
    return best


def delivery_mode_label(label: str) -> str:
    return "C-Section" if label == "CSection" else "Normal"


def delivery_type_label(label: str) -> str:
    mapped = _TYPE_LABELS.get(label, "Unknown")
    if mapped in _URGENT_TYPE_LABELS:
        return mapped.upper()
    return mapped


def resolve_prediction(probabilities: dict[str, float] | None, is_mode: bool) -> str:
    """Most likely label with its confidence, e.g. 'C-Section (70%)'.

    Args:
        probabilities: Label -> probability map.
        is_mode: True for delivery-mode maps, False for delivery-type maps.

    Returns:
        '<label> (<percent>%)', or 'N/A' when the map is empty or absent.
    """
    winner = pick_max(probabilities)
    if winner is None:
        return NOT_AVAILABLE
    label, probability = winner
    display = delivery_mode_label(label) if is_mode else delivery_type_label(label)
    return f"{display} ({percent(probability)}%)"


# =============================================================================
# Risk scores
# =============================================================================


def filter_risk_scores(
    scores: dict[str, float] | None, threshold: float = RISK_DISPLAY_THRESHOLD
) -> dict[str, float]:
    """Keep risk factors whose severity is strictly above the threshold."""
    if not scores:
        return {}
    return {name: value for name, value in scores.items() if value > threshold}


def build_risk_items(
    scores: dict[str, float] | None,
    threshold: float = RISK_DISPLAY_THRESHOLD,
    *,
    icon: str = "heart",
) -> list[ProfileItem]:
    """Profile items for the risk factor panel.

    Absent map -> 'Risk Analysis: N/A'; nothing above threshold ->
    'Overall Risk: Low'; otherwise one '<Factor>: NN% Risk' item per factor.
    """
    if scores is None:
        return [ProfileItem(icon=icon, label="Risk Analysis", value=NOT_AVAILABLE)]
    shown = filter_risk_scores(scores, threshold)
    if not shown:
        return [ProfileItem(icon=icon, label="Overall Risk", value="Low")]
    return [
        ProfileItem(
            icon=icon,
            label=format_camel_label(name),
            value=f"{percent(value)}% Risk",
        )
        for name, value in shown.items()
    ]


# =============================================================================
# Probability bars
# =============================================================================


def _bar_label(key: str) -> str:
    if key == "FullTerm":
        return "Matured"
    return format_camel_label(key)


def build_probability_panel(
    title: str, probabilities: dict[str, float] | None
) -> ProbabilityPanel | None:
    """One bar per entry, in map order; None when there is no map at all."""
    if probabilities is None:
        return None
    if not probabilities:
        return ProbabilityPanel(title=title, empty_message=PROBABILITY_UNAVAILABLE)
    return ProbabilityPanel(
        title=title,
        bars=[
            ProbabilityBar(
                label=_bar_label(key),
                probability=value,
                percent_label=f"{percent(value)}%",
            )
            for key, value in probabilities.items()
        ],
    )
