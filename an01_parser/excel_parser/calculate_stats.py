# an01_parser/excel_parser/calculate_stats.py

"""Savings statistics of a lot, derived from its offers."""

import logging
from typing import Sequence

from ..constants import WINNER_RANK
from ..helpers.cell_values import round2
from ..models import Offer, Stats

log = logging.getLogger(__name__)


def calculate_stats(offers: Sequence[Offer]) -> Stats:
    """Computes average / min / max amounts, the winner and the savings.

    Logic:
        - only offers with a positive amount count (all of them once they
          come from `extract_offers`);
        - the winner is the offer ranked 1 in the final ranking, or the first
          offer when nobody holds rank 1;
        - `saving_amount` = average - winner amount;
        - `saving_percent` = saving_amount / average * 100, or 0 when the
          average is 0.

    Args:
        offers (Sequence[Offer]): Offers of one lot in sheet order.

    Returns:
        Stats: All values rounded to 2 decimals. An empty offer list gives
        zeros and no winner.
    """
    valid_offers = [offer for offer in offers if offer.amount_ttc > 0]
    if not valid_offers:
        return Stats()

    amounts = [offer.amount_ttc for offer in valid_offers]
    average = round2(sum(amounts) / len(amounts))
    winner = next((offer for offer in valid_offers if offer.rank_final == WINNER_RANK), valid_offers[0])

    saving_amount = round2(average - winner.amount_ttc)
    if average == 0:
        log.warning("Average amount is 0, saving percentage set to 0")
        saving_percent = 0.0
    else:
        saving_percent = round2(saving_amount / average * 100)

    return Stats(
        average=average,
        max=round2(max(amounts)),
        min=round2(min(amounts)),
        winner=winner,
        saving_amount=saving_amount,
        saving_percent=saving_percent,
    )
