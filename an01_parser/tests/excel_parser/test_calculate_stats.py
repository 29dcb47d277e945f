# an01_parser/tests/excel_parser/test_calculate_stats.py

import logging

from an01_parser.excel_parser.calculate_stats import calculate_stats
from an01_parser.models import Offer, Stats


def make_offer(name, amount, rank_final=99, offer_id=0):
    return Offer(
        id=offer_id,
        name=name,
        rank_final=rank_final,
        score_final=0.0,
        rank_financial=99,
        score_financial=0.0,
        rank_technical=99,
        score_technical=0.0,
        amount_ttc=amount,
    )


def test_no_offers_gives_zero_stats():
    stats = calculate_stats([])

    assert stats == Stats()
    assert stats.winner is None


def test_winner_is_rank_one_offer():
    offers = [make_offer("ALPHA SARL", 100000, rank_final=2), make_offer("BETA SAS", 90000, rank_final=1)]

    stats = calculate_stats(offers)

    assert stats.winner.name == "BETA SAS"
    assert stats.average == 95000
    assert stats.min == 90000
    assert stats.max == 100000
    assert stats.saving_amount == 5000
    assert stats.saving_percent == 5.26


def test_first_offer_wins_without_rank_one():
    offers = [make_offer("ALPHA SARL", 120, rank_final=2), make_offer("BETA SAS", 80, rank_final=3)]

    stats = calculate_stats(offers)

    assert stats.winner.name == "ALPHA SARL"
    assert stats.saving_amount == -20
    assert stats.saving_percent == -20


def test_first_rank_one_offer_wins_on_ties():
    offers = [make_offer("ALPHA", 300, rank_final=1), make_offer("BETA", 100, rank_final=1)]

    assert calculate_stats(offers).winner.name == "ALPHA"


def test_values_are_rounded_to_two_decimals():
    offers = [make_offer("A", 100, rank_final=1), make_offer("B", 100.01), make_offer("C", 100.01)]

    stats = calculate_stats(offers)

    assert stats.average == 100.01
    assert stats.saving_amount == 0.01
    assert stats.saving_percent == 0.01


def test_non_positive_amounts_are_ignored():
    offers = [make_offer("A", 0, rank_final=1), make_offer("B", 50, rank_final=2)]

    stats = calculate_stats(offers)

    assert stats.average == 50
    assert stats.winner.name == "B"


def test_average_is_the_mean_of_valid_amounts():
    amounts = [1000.5, 2000.25, 2999.25]
    offers = [make_offer(f"O{i}", amount, offer_id=i) for i, amount in enumerate(amounts)]

    assert calculate_stats(offers).average == 2000


def test_single_offer_has_no_saving(caplog):
    with caplog.at_level(logging.WARNING):
        stats = calculate_stats([make_offer("SEUL", 500, rank_final=1)])

    assert stats.average == stats.min == stats.max == 500
    assert stats.saving_amount == 0
    assert stats.saving_percent == 0
    assert caplog.records == []
