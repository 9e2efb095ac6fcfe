"""Tests for stock validation of checkout entries."""

from ordering.checkout.model import CheckoutEntry
from ordering.stock.validator import LOW_STOCK_THRESHOLD, classify, validate_stock


def _entry(line_id, quantity, available_stock):
    return CheckoutEntry(
        line_id=line_id,
        product_id=line_id,
        quantity=quantity,
        unit_price=1000,
        available_stock=available_stock,
    )


class TestClassify:
    def test_request_above_stock_is_insufficient(self):
        line = classify(1, requested_quantity=3, available_stock=2)
        assert line.insufficient is True
        assert line.low_stock is False

    def test_request_equal_to_stock_is_sufficient(self):
        line = classify(1, requested_quantity=2, available_stock=2)
        assert line.insufficient is False

    def test_low_stock_at_threshold(self):
        line = classify(1, requested_quantity=1, available_stock=LOW_STOCK_THRESHOLD)
        assert line.low_stock is True

    def test_not_low_above_threshold(self):
        line = classify(1, requested_quantity=1, available_stock=LOW_STOCK_THRESHOLD + 1)
        assert line.low_stock is False

    def test_zero_stock_is_insufficient_not_low(self):
        line = classify(1, requested_quantity=1, available_stock=0)
        assert line.insufficient is True
        assert line.low_stock is False

    def test_insufficient_and_low_stock_are_exclusive(self):
        for available in range(0, 6):
            for requested in range(1, 6):
                line = classify(1, requested, available)
                assert not (line.insufficient and line.low_stock)


class TestValidateStock:
    def test_one_insufficient_line_flags_report(self):
        report = validate_stock([_entry(1, 1, 10), _entry(2, 3, 2)])

        assert report.has_insufficient_stock is True
        assert [line.line_id for line in report.insufficient_lines] == [2]

    def test_all_sufficient(self):
        report = validate_stock([_entry(1, 1, 10), _entry(2, 2, 2)])

        assert report.has_insufficient_stock is False
        assert [line.line_id for line in report.low_stock_lines] == [2]

    def test_empty_selection(self):
        report = validate_stock([])
        assert report.lines == ()
        assert report.has_insufficient_stock is False
