"""
Tests for the parse orchestrator.

Covers the end-to-end scenarios of an AN01 workbook (single lot, technical
sheet, empty lot, fallback sheet, no sheets, lot ordering), the per-lot
failure isolation and the async and CLI entry points.
"""

import json
import logging
from unittest.mock import patch

import pytest

from an01_parser.exceptions import NoSheetsError, NoValidLotsError, WorkbookDecodingError
from an01_parser.models import Metadata, Workbook
from an01_parser.parse import (
    compare_lot_names,
    main,
    parse_analysis_bytes,
    parse_analysis_file,
    parse_analysis_path,
    parse_analysis_workbook,
)


def _single_offer_rows(lot_rows_factory, name="ALPHA SARL", amount=1000):
    return lot_rows_factory([[name, 1, 80, 1, 40, 1, 40, amount]])


class TestScenarios:
    def test_single_lot_with_two_offers(self, make_workbook, scenario_a_rows):
        result = parse_analysis_workbook(make_workbook({"Lot 1": scenario_a_rows}))

        assert len(result.lots) == 1
        lot = result.lots[0]
        assert lot.lot_name == "Lot 1"
        assert len(lot.offers) == 2
        assert lot.stats.winner.name == "BETA SAS"
        assert lot.stats.average == 95000
        assert lot.stats.saving_amount == 5000
        assert lot.stats.saving_percent == 5.26
        assert lot.technical_analysis is None
        assert result.global_metadata == {}

    def test_lot_with_technical_sheet(self, make_workbook, scenario_a_rows, technical_rows):
        result = parse_analysis_workbook(make_workbook({"Lot 1": scenario_a_rows, "QT-Lot 1": technical_rows}))

        analysis = result.lots[0].technical_analysis
        assert [candidate.candidate_name for candidate in analysis] == ["ALPHA SARL", "BETA SAS"]
        offer_names = {offer.name for offer in result.lots[0].offers}
        assert all(candidate.candidate_name in offer_names for candidate in analysis)

    def test_technical_sheet_is_not_a_lot(self, make_workbook, scenario_a_rows, technical_rows):
        result = parse_analysis_workbook(make_workbook({"Lot 1": scenario_a_rows, "QT-Lot 1": technical_rows}))

        assert [lot.lot_name for lot in result.lots] == ["Lot 1"]

    def test_lot_without_offers_is_skipped(self, make_workbook, scenario_a_rows, lot_rows_factory, caplog):
        workbook = make_workbook({"Lot 1": scenario_a_rows, "Lot 2": lot_rows_factory([])})

        with caplog.at_level(logging.WARNING):
            result = parse_analysis_workbook(workbook)

        assert [lot.lot_name for lot in result.lots] == ["Lot 1"]
        assert "Sheet 'Lot 2' skipped: no offers found." in caplog.text

    def test_first_sheet_fallback(self, make_workbook, scenario_a_rows):
        result = parse_analysis_workbook(make_workbook({"Feuil1": scenario_a_rows}))

        assert [lot.lot_name for lot in result.lots] == ["Feuil1"]

    def test_an01_sheet_fallback(self, make_workbook, scenario_a_rows):
        workbook = make_workbook({"Synthèse": [["Titre", ""]], "AN01 Nettoyage": scenario_a_rows})

        assert [lot.lot_name for lot in parse_analysis_workbook(workbook).lots] == ["AN01 Nettoyage"]

    def test_workbook_without_sheets(self):
        with pytest.raises(NoSheetsError):
            parse_analysis_workbook(Workbook(sheets=[]))

    def test_lots_are_sorted_by_trailing_number(self, make_workbook, lot_rows_factory):
        workbook = make_workbook(
            {
                "Lot 10": _single_offer_rows(lot_rows_factory),
                "Lot 2": _single_offer_rows(lot_rows_factory),
            }
        )

        assert [lot.lot_name for lot in parse_analysis_workbook(workbook).lots] == ["Lot 2", "Lot 10"]

    def test_global_metadata_from_synthesis_sheet(self, make_workbook, scenario_a_rows):
        synthesis = [["Synthèse", ""], ["Acheteur", "Mme Durand"], ["Objet", "Nettoyage"]]

        result = parse_analysis_workbook(make_workbook({"Synthèse": synthesis, "Lot 1": scenario_a_rows}))

        assert result.global_metadata == {"Acheteur": "Mme Durand", "Objet": "Nettoyage"}

    def test_no_valid_lots(self, make_workbook):
        with pytest.raises(NoValidLotsError) as exc_info:
            parse_analysis_workbook(make_workbook({"Lot 1": [["rien"]], "Lot 2": [["toujours rien"]]}))

        assert exc_info.value.sheet_names == ["Lot 1", "Lot 2"]
        assert "No valid offer data" in str(exc_info.value)


class TestFailureIsolation:
    def test_failing_lot_is_skipped(self, make_workbook, lot_rows_factory, caplog):
        workbook = make_workbook(
            {
                "Lot 1": _single_offer_rows(lot_rows_factory),
                "Lot 2": _single_offer_rows(lot_rows_factory),
            }
        )

        with patch("an01_parser.parse.extract_metadata", side_effect=[RuntimeError("boom"), Metadata()]):
            with caplog.at_level(logging.WARNING):
                result = parse_analysis_workbook(workbook)

        assert [lot.lot_name for lot in result.lots] == ["Lot 2"]
        assert "Error while parsing sheet 'Lot 1', lot skipped." in caplog.text

    def test_all_lots_failing_is_fatal(self, make_workbook, lot_rows_factory):
        workbook = make_workbook({"Lot 1": _single_offer_rows(lot_rows_factory)})

        with patch("an01_parser.parse.extract_offers", side_effect=ValueError("boom")):
            with pytest.raises(NoValidLotsError):
                parse_analysis_workbook(workbook)


class TestProperties:
    def test_parsing_is_idempotent(self, make_workbook, scenario_a_rows, technical_rows):
        workbook = make_workbook({"Lot 1": scenario_a_rows, "QT-Lot 1": technical_rows})

        assert parse_analysis_workbook(workbook) == parse_analysis_workbook(workbook)

    def test_offers_have_positive_amounts_and_average_matches(self, make_workbook, lot_rows_factory):
        rows = lot_rows_factory(
            [
                ["ALPHA", 1, 80, 1, 40, 1, 40, "1 000,50"],
                ["BETA", 2, 70, 2, 30, 2, 40, 0],
                ["GAMMA", 3, 60, 3, 30, 3, 30, 2000.25],
            ]
        )

        lot = parse_analysis_workbook(make_workbook({"Lot 1": rows})).lots[0]

        assert all(offer.amount_ttc > 0 for offer in lot.offers)
        amounts = [offer.amount_ttc for offer in lot.offers]
        assert lot.stats.average == pytest.approx(sum(amounts) / len(amounts), abs=0.01)

    def test_sub_cent_amounts_are_not_offers(self, make_workbook, lot_rows_factory):
        rows = lot_rows_factory(
            [
                ["ALPHA", 1, 80, 1, 40, 1, 40, 0.004],
                ["BETA", 2, 70, 2, 30, 2, 40, 100],
                ["GAMMA", 3, 60, 3, 30, 3, 30, 300],
            ]
        )

        lot = parse_analysis_workbook(make_workbook({"Lot 1": rows})).lots[0]

        assert [offer.name for offer in lot.offers] == ["BETA", "GAMMA"]
        assert lot.stats.average == 200
        assert lot.stats.winner.name == "BETA"

    def test_lot_with_only_sub_cent_amounts_is_skipped(self, make_workbook, scenario_a_rows, lot_rows_factory):
        workbook = make_workbook(
            {
                "Lot 1": scenario_a_rows,
                "Lot 2": lot_rows_factory([["ALPHA", 1, 80, 1, 40, 1, 40, "0,001"]]),
            }
        )

        assert [lot.lot_name for lot in parse_analysis_workbook(workbook).lots] == ["Lot 1"]

    def test_technical_scores_keep_their_leading_number(self, make_workbook, scenario_a_rows):
        qt_rows = [
            ["", "", "", "Note ALPHA SARL", "", "Note BETA SAS", ""],
            ["1", 5, "Qualité", "3 pts", "", "4/5", ""],
        ]

        lot = parse_analysis_workbook(make_workbook({"Lot 1": scenario_a_rows, "QT Lot 1": qt_rows})).lots[0]

        assert [candidate.criteria[0].score for candidate in lot.technical_analysis] == [3.0, 4.0]

    def test_serialised_keys_are_camel_case(self, make_workbook, scenario_a_rows):
        payload = parse_analysis_workbook(make_workbook({"Lot 1": scenario_a_rows})).model_dump(by_alias=True)

        lot = payload["lots"][0]
        assert set(lot) == {"lotName", "metadata", "offers", "stats", "technicalAnalysis"}
        assert "amountTTC" in lot["offers"][0]
        assert "savingPercent" in lot["stats"]
        assert "globalMetadata" in payload


@pytest.mark.parametrize(
    "a, b, expected",
    [
        ("Lot 2", "Lot 10", -1),
        ("Lot 10", "Lot 2", 1),
        ("Lot 3 ", "Lot 12", -1),
        ("Feuil1", "Feuil1", 0),
        ("Alpha", "beta", -1),
        ("Lot 0", "Lot 1", -1),
    ],
)
def test_compare_lot_names(a, b, expected):
    assert compare_lot_names(a, b) == expected


class TestEntryPoints:
    def test_parse_analysis_bytes(self, make_xlsx_bytes, scenario_a_rows):
        result = parse_analysis_bytes(make_xlsx_bytes({"Lot 1": scenario_a_rows}))

        assert result.lots[0].stats.winner.amount_ttc == 90000

    def test_parse_analysis_bytes_rejects_garbage(self):
        with pytest.raises(WorkbookDecodingError):
            parse_analysis_bytes(b"not a spreadsheet")

    @pytest.mark.asyncio
    async def test_parse_analysis_file(self, make_xlsx_bytes, scenario_a_rows):
        result = await parse_analysis_file(make_xlsx_bytes({"Lot 1": scenario_a_rows}))

        assert [lot.lot_name for lot in result.lots] == ["Lot 1"]

    def test_parse_analysis_path_sets_file_path_on_errors(self, tmp_path):
        bad_file = tmp_path / "analyse.xlsx"
        bad_file.write_bytes(b"garbage")

        with pytest.raises(WorkbookDecodingError) as exc_info:
            parse_analysis_path(str(bad_file))

        assert exc_info.value.file_path == str(bad_file.resolve())


class TestCli:
    @pytest.fixture(autouse=True)
    def _log_dir(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
        yield
        app_logger = logging.getLogger("an01_parser")
        for handler in app_logger.handlers[:]:
            handler.close()
            app_logger.removeHandler(handler)

    def test_writes_json_output(self, tmp_path, make_xlsx_bytes, scenario_a_rows):
        source = tmp_path / "analyse.xlsx"
        source.write_bytes(make_xlsx_bytes({"Lot 1": scenario_a_rows}))
        output = tmp_path / "result.json"

        exit_code = main([str(source), "-o", str(output)])

        assert exit_code == 0
        payload = json.loads(output.read_text(encoding="utf-8"))
        assert payload["lots"][0]["lotName"] == "Lot 1"
        assert payload["lots"][0]["offers"][1]["amountTTC"] == 90000
        assert (tmp_path / "logs" / "an01_parser.log").exists()

    def test_prints_json_without_output_option(self, tmp_path, make_xlsx_bytes, scenario_a_rows, capsys):
        source = tmp_path / "analyse.xlsx"
        source.write_bytes(make_xlsx_bytes({"Lot 1": scenario_a_rows}))

        assert main([str(source)]) == 0
        assert '"lotName": "Lot 1"' in capsys.readouterr().out

    def test_missing_file(self, tmp_path):
        assert main([str(tmp_path / "absent.xlsx")]) == 1

    def test_unreadable_file(self, tmp_path):
        source = tmp_path / "analyse.xlsx"
        source.write_bytes(b"garbage")

        assert main([str(source)]) == 1
