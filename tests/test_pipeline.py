import itertools
import os
import types
import unittest
from datetime import date
from unittest import mock

import core
from tests.statements import BARCLAYS_TEXT, CHASE_TEXT, CHASE_THREE_ROWS, GENERIC_TEXT, MONZO_TEXT


def _ids():
    counter = itertools.count(1)
    return lambda: f"txn-{next(counter)}"


def _row(day, amount=10.0, description="Shop", txn_type="expense", balance=None):
    return {
        "Date": date(2024, 1, day),
        "Description": description,
        "Amount": amount,
        "Type": txn_type,
        "Balance": balance,
    }


class TestValidateTransactions(unittest.TestCase):
    def test_repairs_and_drops(self):
        cleaned = core.validate_transactions(
            [
                {"Date": date(2024, 1, 1), "Description": "  Tesco   Stores ", "Amount": -10.004, "Type": "Expense"},
                {"Date": "2024-02-30", "Description": "Bad date", "Amount": 1.0, "Type": "expense"},
                {"Date": date(2024, 1, 2), "Description": "   ", "Amount": 1.0, "Type": "expense"},
                {"Date": date(2024, 1, 3), "Description": "Zero", "Amount": 0.001, "Type": "expense"},
                {"Date": date(2024, 1, 4), "Description": "NaN", "Amount": float("nan"), "Type": "expense"},
                {"Date": date(2024, 1, 5), "Description": "Odd type", "Amount": 1.0, "Type": "transfer"},
                {"Date": "2024-01-06", "Description": "ISO string", "Amount": "7.5", "Type": "income"},
                "not a dict",
            ]
        )
        self.assertEqual(len(cleaned), 2)
        self.assertEqual(cleaned[0]["Description"], "Tesco Stores")
        self.assertEqual(cleaned[0]["Amount"], 10.0)
        self.assertEqual(cleaned[0]["Type"], "expense")
        self.assertEqual(cleaned[1]["Date"], date(2024, 1, 6))
        self.assertEqual(cleaned[1]["Amount"], 7.5)

    def test_duplicates_with_balance_are_dropped(self):
        cleaned = core.validate_transactions(
            [
                _row(1, description="TESCO", balance=90.0),
                _row(1, description="Tesco", balance=90.0),
                _row(1, description="TESCO", balance=80.0),
            ]
        )
        self.assertEqual(len(cleaned), 2)

    def test_duplicates_without_balance_are_kept(self):
        cleaned = core.validate_transactions([_row(1), _row(1)])
        self.assertEqual(len(cleaned), 2)

    def test_keeps_statement_order(self):
        cleaned = core.validate_transactions([_row(9), _row(2), _row(5)])
        self.assertEqual([t["Date"].day for t in cleaned], [9, 2, 5])


class TestCalculateConfidence(unittest.TestCase):
    def test_empty(self):
        self.assertEqual(core.calculate_confidence([]), 0.0)

    def test_never_decreases_with_more_ordered_rows(self):
        previous = 0.0
        for k in range(1, 26):
            rows = [_row(day) for day in range(1, k + 1)]
            score = core.calculate_confidence(rows)
            self.assertGreaterEqual(score, previous)
            previous = score
        self.assertEqual(previous, 1.0)

    def test_descending_statements_count_as_ordered(self):
        ascending = core.calculate_confidence([_row(d) for d in range(1, 6)])
        descending = core.calculate_confidence([_row(d) for d in range(5, 0, -1)])
        self.assertEqual(ascending, descending)

    def test_shuffled_dates_score_lower(self):
        ordered = core.calculate_confidence([_row(d) for d in (1, 2, 3, 4, 5)])
        shuffled = core.calculate_confidence([_row(d) for d in (1, 5, 2, 4, 3)])
        self.assertLess(shuffled, ordered)

    def test_low_yield_scores_lower(self):
        rows = [_row(d) for d in range(1, 5)]
        self.assertLess(core.calculate_confidence(rows, 8), core.calculate_confidence(rows, 4))

    def test_single_row_cannot_pass_the_gate(self):
        self.assertLess(core.calculate_confidence([_row(1)], 1), core.CONFIDENCE_THRESHOLD)
        self.assertGreaterEqual(core.calculate_confidence([_row(1), _row(2)], 2), core.CONFIDENCE_THRESHOLD)

    def test_generic_parses_need_more_rows(self):
        two = [_row(1), _row(2)]
        three = [_row(1), _row(2), _row(3)]
        generic_rows = core.GENERIC_MIN_CONFIDENT_ROWS
        self.assertLess(core.calculate_confidence(two, 2, min_rows=generic_rows), core.CONFIDENCE_THRESHOLD)
        self.assertGreaterEqual(core.calculate_confidence(three, 3, min_rows=generic_rows), core.CONFIDENCE_THRESHOLD)

    def test_in_unit_interval(self):
        rows = [_row(1, amount=500000.0)]
        score = core.calculate_confidence(rows)
        self.assertGreaterEqual(score, 0.0)
        self.assertLessEqual(score, 1.0)


class TestCategorise(unittest.TestCase):
    def test_keywords(self):
        cases = [
            ("TESCO STORES 3041", "Groceries"),
            ("PRET A MANGER", "Eating out"),
            ("NETFLIX.COM", "Subscriptions"),
            ("Amazon Prime Membership", "Subscriptions"),
            ("AMAZON.CO.UK MARKETPLACE", "Shopping"),
            ("TFL TRAVEL CHARGE", "Transport"),
            ("DIRECT DEBIT PAYMENT TO BRITISH GAS", "Bills & Utilities"),
            ("HMRC SELF ASSESSMENT", "Tax"),
            ("XERO UK", "Business Services"),
            ("BOOTS PHARMACY", "Health & Wellbeing"),
            ("TRANSFER TO MONEYBOX", "Transfers"),
            ("Something unusual", "Other"),
        ]
        for description, expected in cases:
            with self.subTest(description=description):
                self.assertEqual(core.categorise_transaction(description, "expense"), expected)

    def test_income_is_always_income(self):
        self.assertEqual(core.categorise_transaction("TESCO REFUND", "income"), "Income")

    def test_categories_are_known(self):
        for category, _ in core.CATEGORY_RULES:
            self.assertIn(category, core.CATEGORIES)


class TestParseStatement(unittest.TestCase):
    def test_chase_statement(self):
        txns = core.parse_statement(CHASE_TEXT, 1, id_factory=_ids())

        self.assertEqual(len(txns), 4)
        self.assertEqual([t.id for t in txns], ["txn-1", "txn-2", "txn-3", "txn-4"])
        self.assertEqual(txns[0].date, "2024-01-15")
        self.assertEqual(txns[0].description, "TESCO STORES")
        self.assertEqual(txns[0].category, "Groceries")
        self.assertEqual(txns[2].type, "income")
        self.assertEqual(txns[2].category, "Income")
        self.assertEqual(txns[3].signed_amount, 15.00)
        self.assertTrue(all(t.parser_used == "chase" for t in txns))
        self.assertTrue(all(t.confidence == 0.6 for t in txns))

    def test_same_input_same_output(self):
        first = core.parse_statement(MONZO_TEXT, 1, id_factory=_ids())
        second = core.parse_statement(MONZO_TEXT, 1, id_factory=_ids())
        self.assertEqual([t.to_dict() for t in first], [t.to_dict() for t in second])

    def test_default_ids_are_unique(self):
        txns = core.parse_statement(CHASE_TEXT, 1)
        self.assertEqual(len({t.id for t in txns}), len(txns))

    def test_barclays_statement(self):
        txns = core.parse_statement(BARCLAYS_TEXT, 1, id_factory=_ids())
        self.assertEqual([t.signed_amount for t in txns], [-50.00, 250.00])
        self.assertEqual(txns[0].parser_used, "barclays")
        self.assertEqual(txns[0].confidence, 0.55)

    def test_unknown_bank_uses_generic_parser(self):
        txns = core.parse_statement(GENERIC_TEXT, 1, id_factory=_ids())
        self.assertEqual(len(txns), 3)
        self.assertEqual(txns[0].parser_used, "generic")
        self.assertEqual(txns[0].confidence, 0.575)
        self.assertEqual([t.type for t in txns], ["expense", "income", "expense"])

    def test_failing_bank_parser_falls_back(self):
        real_loader = core.load_parser_module

        def broken(lines, year):
            raise ValueError("layout changed")

        def loader(bank, parsers_dir=core.PARSERS_DIR):
            if bank == "chase":
                return types.SimpleNamespace(extract_transactions=broken)
            return real_loader(bank, parsers_dir)

        with mock.patch.object(core, "load_parser_module", side_effect=loader):
            with self.assertLogs("core", level="WARNING"):
                txns = core.parse_statement(CHASE_TEXT, 1, id_factory=_ids())

        self.assertEqual(len(txns), 4)
        self.assertTrue(all(t.parser_used == "generic" for t in txns))

    def test_to_dict_keys(self):
        txn = core.parse_statement(CHASE_TEXT, 1, id_factory=_ids())[0]
        self.assertEqual(
            sorted(txn.to_dict()),
            sorted(["id", "date", "description", "amount", "type", "category", "parserUsed", "confidence"]),
        )


class TestParsingErrors(unittest.TestCase):
    def assertKind(self, ctx, kind):
        self.assertIs(ctx.exception.kind, kind)

    def test_too_many_pages(self):
        with self.assertRaises(core.ParsingError) as ctx:
            core.parse_statement(CHASE_TEXT, 51)
        self.assertKind(ctx, core.ErrorKind.PDF_TOO_LARGE)
        self.assertEqual(ctx.exception.details, {"pageCount": 51, "maxPages": 50})

    def test_page_limit_is_inclusive(self):
        self.assertEqual(len(core.parse_statement(CHASE_TEXT, 50)), 4)

    def test_empty_text_stops_before_detection(self):
        with mock.patch.object(core, "detect_bank_type") as detect:
            with self.assertRaises(core.ParsingError) as ctx:
                core.parse_statement("short", 2)
        self.assertKind(ctx, core.ErrorKind.PDF_EMPTY)
        detect.assert_not_called()
        self.assertEqual(ctx.exception.details["pageCount"], 2)
        self.assertEqual(ctx.exception.details["textLength"], 5)

    def test_recognised_bank_without_rows(self):
        text = "Monzo Bank Limited\nYour statement has no activity for this period at all.\n"
        with self.assertRaises(core.ParsingError) as ctx:
            core.parse_statement(text, 1)
        self.assertKind(ctx, core.ErrorKind.NO_TRANSACTIONS_FOUND)
        self.assertEqual(ctx.exception.details["bank"], "Monzo")

    def test_labelled_but_unsupported_bank(self):
        text = "Bank: First Direct\nStatement of account for Mr A Customer\nNothing to report this period.\n"
        with self.assertRaises(core.ParsingError) as ctx:
            core.parse_statement(text, 1)
        self.assertKind(ctx, core.ErrorKind.UNSUPPORTED_BANK)
        self.assertEqual(ctx.exception.details["bankName"], "First Direct")
        self.assertIn("Barclays", ctx.exception.details["supportedBanks"])

    def test_unrecognised_bank(self):
        text = "Welcome to your account overview. There is nothing to show here today."
        with self.assertRaises(core.ParsingError) as ctx:
            core.parse_statement(text, 1)
        self.assertKind(ctx, core.ErrorKind.BANK_NOT_RECOGNIZED)
        self.assertTrue(ctx.exception.details["textSample"].startswith("Welcome"))

    def test_low_confidence_is_rejected(self):
        with mock.patch.object(core, "calculate_confidence", return_value=0.4):
            with self.assertRaises(core.ParsingError) as ctx:
                core.parse_statement(CHASE_THREE_ROWS, 1)
        self.assertKind(ctx, core.ErrorKind.GENERIC_PARSER_FAILED)
        self.assertEqual(ctx.exception.details["confidence"], 0.4)
        self.assertEqual(ctx.exception.details["transactionCount"], 3)
        self.assertEqual(ctx.exception.details["parserUsed"], "chase")

    def test_letter_with_one_dated_amount_is_rejected(self):
        text = (
            "Dear customer, thank you for your order. Invoice dated 12/03/2024 for garden "
            "services totals 45.00 payable within 30 days."
        )
        with self.assertRaises(core.ParsingError) as ctx:
            core.parse_statement(text, 1)
        self.assertKind(ctx, core.ErrorKind.GENERIC_PARSER_FAILED)
        self.assertEqual(ctx.exception.details["parserUsed"], "generic")
        self.assertEqual(ctx.exception.details["transactionCount"], 1)
        self.assertLess(ctx.exception.details["confidence"], core.CONFIDENCE_THRESHOLD)

    def test_threshold_itself_passes(self):
        with mock.patch.object(core, "calculate_confidence", return_value=0.5):
            self.assertEqual(len(core.parse_statement(CHASE_TEXT, 1)), 4)

    def test_user_message(self):
        err = core.ParsingError(core.ErrorKind.PDF_TOO_LARGE, {"pageCount": 60, "maxPages": 50})
        self.assertIn("60 pages", str(err))
        self.assertIn("60 pages", err.user_message())


class TestPipelineConfig(unittest.TestCase):
    def test_defaults(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            config = core.PipelineConfig.from_env()
        self.assertEqual(config.max_pdf_pages, core.MAX_PDF_PAGES)
        self.assertEqual(config.confidence_threshold, core.CONFIDENCE_THRESHOLD)

    def test_environment_overrides(self):
        env = {"STATEMENT_MAX_PDF_PAGES": "5", "STATEMENT_CONFIDENCE_THRESHOLD": "0.9"}
        with mock.patch.dict(os.environ, env, clear=True):
            config = core.PipelineConfig.from_env()
        self.assertEqual(config.max_pdf_pages, 5)
        self.assertEqual(config.confidence_threshold, 0.9)

        with self.assertRaises(core.ParsingError) as ctx:
            core.parse_statement(CHASE_TEXT, 6, config=config)
        self.assertIs(ctx.exception.kind, core.ErrorKind.PDF_TOO_LARGE)

        with self.assertRaises(core.ParsingError) as ctx:
            core.parse_statement(CHASE_TEXT, 1, config=config)
        self.assertIs(ctx.exception.kind, core.ErrorKind.GENERIC_PARSER_FAILED)


class TestExtractPdfText(unittest.TestCase):
    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            core.extract_pdf_text(os.path.join("tests", "does-not-exist.pdf"))


if __name__ == "__main__":
    unittest.main()
