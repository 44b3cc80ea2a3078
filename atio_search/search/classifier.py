"""Cost and complexity labels derived from a record's text and tag signals. Pure, no I/O."""

import re
from dataclasses import dataclass, field

LOW_COST_TERMS = re.compile(
    r"frugal|traditional|indigenous|low[- ]?cost|organic|nature[- ]?based|affordable"
    r"|appropriate\s*tech|low[- ]?tech|free\s*to\s*use|minimal\s*cost|cost[- ]?effective"
    r"|resource[- ]?constrained|smallholder|small[- ]?scale|low[- ]?income"
)
HIGH_COST_TERMS = re.compile(
    r"ai\b|blockchain|biotech|genetic|genomic|satellite|drone|automation"
    r"|capital[- ]?intensive|premium|high[- ]?cost|sophisticated\s*equipment"
)
SIMPLE_TERMS = re.compile(
    r"frugal|traditional|indigenous|simple|basic|easy\s*to\s*use|low[- ]?cost|manual"
    r"|low[- ]?tech|appropriate\s*tech|minimal\s*training|no\s*special\s*equipment|accessible"
)
ADVANCED_TERMS = re.compile(
    r"ai\b|blockchain|biotech|genetic|genomic|satellite|drone|machine\s*learning|automated"
    r"|sophisticated|digital\s*platform|software\s*platform|remote\s*sensing|gis\b|iot\b|automation"
)


@dataclass(frozen=True)
class Signals:
    types: list[str] = field(default_factory=list)
    use_cases: list[str] = field(default_factory=list)
    users: list[str] = field(default_factory=list)
    short_description: str = ""
    long_description: str = ""
    is_grassroots: bool = False

    def search_text(self) -> str:
        desc = " ".join(d for d in (self.short_description, self.long_description) if d)
        text = " ".join([*self.types, *self.use_cases, *self.users, desc])
        return re.sub(r"\s+", " ", text.lower())


def derive_cost(signals: Signals) -> str:
    text = signals.search_text()
    has_low = bool(LOW_COST_TERMS.search(text)) or signals.is_grassroots
    has_high = bool(HIGH_COST_TERMS.search(text))

    if has_high and not has_low:
        return "high"
    if has_low and not has_high:
        return "low"
    return "med"


def derive_complexity(signals: Signals) -> str:
    text = signals.search_text()
    has_simple = bool(SIMPLE_TERMS.search(text))
    has_advanced = bool(ADVANCED_TERMS.search(text))

    if has_advanced and not has_simple:
        return "advanced"
    if has_simple and not has_advanced:
        return "simple"
    return "moderate"
