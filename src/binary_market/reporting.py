"""
Settlement reporting for a market.
Tabulates every bet with what it pays (or paid) under the parimutuel formula.
"""

from typing import Any, Dict, Optional

import pandas as pd

from .market import PredictionMarket
from .market.ledger import validate_outcome
from .market.settlement import settle

REPORT_COLUMNS = [
    "participant",
    "side",
    "amount",
    "placed_at",
    "claimed",
    "winner",
    "share",
    "payout",
]


def settlement_report(market: PredictionMarket, outcome: Optional[bool] = None) -> pd.DataFrame:
    """
    One row per bet, settled against ``outcome``.

    Args:
        market: The market to report on
        outcome: Outcome to settle against. Defaults to the resolved outcome;
            required before resolution.

    Returns:
        DataFrame with REPORT_COLUMNS; losing rows have zero share and payout
    """
    if outcome is None:
        if not market.market.resolved:
            raise ValueError("market is unresolved; pass the outcome to project")
        outcome = market.market.winning_outcome
    outcome = validate_outcome(outcome)

    bets = market.ledger.bets()
    shares = {s.participant: s.share for s in settle(bets, outcome)}

    rows = []
    for bet in bets:
        winner = bet.outcome == outcome
        share = shares.get(bet.participant, 0)
        rows.append({
            "participant": bet.participant,
            "side": "YES" if bet.outcome else "NO",
            "amount": bet.amount,
            "placed_at": bet.placed_at,
            "claimed": bet.claimed,
            "winner": winner,
            "share": share,
            "payout": bet.amount + share if winner else 0,
        })

    return pd.DataFrame(rows, columns=REPORT_COLUMNS)


def summarize_settlement(report: pd.DataFrame) -> Dict[str, Any]:
    """
    Totals for a settlement report.

    Dust is the part of the total stake that no payout covers.
    """
    if report.empty:
        return {
            "num_bets": 0,
            "num_winners": 0,
            "win_pool": 0,
            "lose_pool": 0,
            "total_payout": 0,
            "claimed_payout": 0,
            "dust": 0,
        }

    winners = report[report["winner"]]
    losers = report[~report["winner"]]
    total_stake = int(report["amount"].sum())
    total_payout = int(winners["payout"].sum())

    return {
        "num_bets": int(len(report)),
        "num_winners": int(len(winners)),
        "win_pool": int(winners["amount"].sum()),
        "lose_pool": int(losers["amount"].sum()),
        "total_payout": total_payout,
        "claimed_payout": int(winners.loc[winners["claimed"], "payout"].sum()),
        "dust": total_stake - total_payout,
    }
