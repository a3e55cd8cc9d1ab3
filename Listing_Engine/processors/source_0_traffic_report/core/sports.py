"""
Sports — Ordered rule table for classifying a listing title by sport.

A prioritized lookup, not a model: categories are evaluated in declaration
order and the first category with any matching pattern wins. No match
classifies as "Other".

Known fragility: several patterns are bare player surnames ("hunter",
"judge", "ryan", "jordan", ...) that also occur as ordinary words in
unrelated titles. They are kept as-is until a product decision narrows them.
"""

from __future__ import annotations

import re

OTHER_SPORT = "Other"

_FOOTBALL = [
    r"\bnfl\b", r"\bfootball\b", r"\bqb\b", r"\brb\b", r"\bwr\b",
    r"\bpatriots\b", r"\bchiefs\b", r"\beagles\b", r"\bcowboys\b",
    r"\braiders\b", r"\bjets\b", r"\bcolts\b", r"\btigers\b",
    r"\bbears\b", r"\bpackers\b", r"\bsteelers\b", r"\bcommanders\b",
    r"\btitans\b", r"\brams\b", r"\bbengals\b",
    # Player names strongly associated with football
    r"\bmahomes\b", r"\bdaniel[s]?\b", r"\bmanning\b", r"\bbarkley\b",
    r"\bpurdy\b", r"\bcam ward\b", r"\bjaxson dart\b",
    r"\bdarnold\b", r"\bhunter\b", r"\bloveland\b", r"\bwilliams.*bears\b",
    r"\bharvey.*rc\b", r"\bfergusson\b", r"\bskattebo\b",
    r"\bdrake maye\b", r"\bgarrett wilson\b", r"\bkyren\b",
    r"\btetairoa\b", r"\bfergu?son\b", r"\bcolston\b",
    r"\bmatthew golden\b", r"\btreveyon\b",
]

_BASEBALL = [
    r"\bmlb\b", r"\bbaseball\b", r"\brc\b.*\btopps\b", r"\btopps\b.*\brc\b",
    r"\bbowman\b", r"\bprospect\b", r"\bpirates\b", r"\bdodgers\b",
    r"\bcubs\b", r"\broyals\b", r"\bastros\b", r"\bmariners\b",
    r"\borioles\b", r"\brays\b", r"\bredsox\b", r"\bred sox\b",
    r"\bangels\b", r"\bpadres\b", r"\bphillies\b", r"\bbraves\b",
    r"\bmets\b", r"\bnationals\b", r"\bcardinals\b", r"\brangers\b",
    r"\bdiamondbacks\b", r"\bblue jays\b", r"\byankees\b",
    r"\bohtani\b", r"\bjudge\b", r"\bskenes\b", r"\btrout\b",
    r"\bryan\b", r"\braleigh\b", r"\bwoo\b", r"\banthony.*red sox\b",
    r"\bjackson.*topps\b", r"\bbo jackson\b", r"\btatis\b",
    r"\bacuna\b", r"\bharper\b", r"\bseager\b", r"\bcarroll\b",
    r"\bbowers.*pirates\b", r"\bcrow.armstrong\b", r"\bmelton.*astros\b",
    r"\bwetherholt\b", r"\bcaglianone\b", r"\bcaminero\b",
    r"\bcrawford.*phillies\b", r"\bde paula\b", r"\bwagner.*orioles\b",
    r"\bjobe\b", r"\bbremner\b", r"\bmcadoo\b", r"\bavina\b",
]

_BASKETBALL = [
    r"\bnba\b", r"\bbasketball\b", r"\bbulls\b", r"\blakers\b",
    r"\bjordan\b", r"\bshaquille\b", r"\bshaq\b", r"\bhoops\b",
]

# (category, compiled patterns) in evaluation order
SPORT_RULES: list[tuple[str, list[re.Pattern]]] = [
    (sport, [re.compile(p, re.IGNORECASE) for p in patterns])
    for sport, patterns in (
        ("Football", _FOOTBALL),
        ("Baseball", _BASEBALL),
        ("Basketball", _BASKETBALL),
    )
]

# Every category detect_sport can return, in table order
SPORT_CATEGORIES = [sport for sport, _ in SPORT_RULES] + [OTHER_SPORT]


def detect_sport(title: str | None) -> str:
    """Return the first sport whose rule set matches *title*, else "Other"."""
    text = title or ""
    for sport, patterns in SPORT_RULES:
        if any(p.search(text) for p in patterns):
            return sport
    return OTHER_SPORT
