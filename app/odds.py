"""
Bookmaker odds helpers: consensus (average) odds, best price per outcome
and implied probabilities for head-to-head markets.

All odds are decimal odds. Probabilities are percentages rounded to 2 dp.
"""
from dataclasses import dataclass, asdict
from typing import Dict, Iterator, List, Optional, Tuple

from app.schemas import OddsEvent
from app.utils.helpers import safe_lower

H2H_MARKET = "h2h"
OUTCOMES = ("home", "draw", "away")


@dataclass
class AverageOdds:
    """Consensus odds across bookmakers; None where no bookmaker priced the side."""
    home: Optional[float]
    away: Optional[float]
    draw: Optional[float] = None


@dataclass
class BestOdds:
    bookmaker: str
    odds: float


@dataclass
class FairProbabilities:
    home: float
    away: float
    draw: Optional[float] = None
    margin: float = 0.0


def odds_to_implied_probability(decimal_odds: float) -> float:
    """
    Implied probability (percent) of decimal odds: 2.00 -> 50.0.

    Raises:
        ValueError: If odds are below 1.0 (not valid decimal odds)
    """
    if decimal_odds is None or decimal_odds < 1.0:
        raise ValueError(f"Invalid decimal odds: {decimal_odds}")
    return round(100.0 / decimal_odds, 2)


def _classify_outcome(name: str, event: OddsEvent) -> Optional[str]:
    """Map an outcome name to home/away/draw."""
    n = safe_lower(name).strip()
    if n == safe_lower(event.home_team) or "home" in n:
        return "home"
    if n == safe_lower(event.away_team) or "away" in n:
        return "away"
    if n == "draw":
        return "draw"
    return None


def _iter_prices(event: OddsEvent, market: str = H2H_MARKET) -> Iterator[Tuple[str, str, float]]:
    """Yield (side, bookmaker, price) for every priced outcome of a market."""
    for bookmaker in event.bookmakers:
        for m in bookmaker.markets:
            if m.key != market:
                continue
            for outcome in m.outcomes:
                side = _classify_outcome(outcome.name, event)
                if side is not None:
                    yield side, bookmaker.title or bookmaker.key, outcome.price


def calculate_average_odds(event: OddsEvent, market: str = H2H_MARKET) -> AverageOdds:
    """Average each side's price across all bookmakers offering the market."""
    totals: Dict[str, List[float]] = {side: [] for side in OUTCOMES}
    for side, _, price in _iter_prices(event, market):
        totals[side].append(price)

    def avg(prices: List[float]) -> Optional[float]:
        if not prices:
            return None
        return round(sum(prices) / len(prices), 2)

    return AverageOdds(
        home=avg(totals["home"]),
        away=avg(totals["away"]),
        draw=avg(totals["draw"]),
    )


def find_best_odds(event: OddsEvent, outcome: str, market: str = H2H_MARKET) -> Optional[BestOdds]:
    """Highest price for one side ("home", "away" or "draw") across bookmakers."""
    if outcome not in OUTCOMES:
        raise ValueError(f"Unknown outcome: {outcome}")

    best: Optional[BestOdds] = None
    for side, bookmaker, price in _iter_prices(event, market):
        if side == outcome and (best is None or price > best.odds):
            best = BestOdds(bookmaker=bookmaker, odds=price)
    return best


def remove_margin(home: float, away: float, draw: Optional[float] = None) -> FairProbabilities:
    """
    Strip the bookmaker overround from implied probabilities (percent).

    The margin above 100% is taken off each outcome in equal parts.
    """
    total = home + away + (draw or 0.0)
    margin = total - 100.0
    if margin <= 0:
        return FairProbabilities(home=home, away=away, draw=draw, margin=round(margin, 2))

    adjustment = margin / (3 if draw is not None else 2)
    return FairProbabilities(
        home=round(home - adjustment, 2),
        away=round(away - adjustment, 2),
        draw=round(draw - adjustment, 2) if draw is not None else None,
        margin=round(margin, 2),
    )


def analyse_event(event: OddsEvent) -> dict:
    """Average odds, implied and fair probabilities, and best prices for one event."""
    average = calculate_average_odds(event)

    implied = {
        side: (odds_to_implied_probability(price) if price is not None else None)
        for side, price in (("home", average.home), ("draw", average.draw), ("away", average.away))
    }

    fair = None
    if implied["home"] is not None and implied["away"] is not None:
        fair = asdict(remove_margin(implied["home"], implied["away"], implied["draw"]))

    best = {}
    for side in OUTCOMES:
        found = find_best_odds(event, side)
        best[side] = asdict(found) if found else None

    return {
        "averageOdds": asdict(average),
        "impliedProbability": implied,
        "fairProbability": fair,
        "bestOdds": best,
    }
