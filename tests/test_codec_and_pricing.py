import unittest

from luckybox.draw import (
    bracket_keys,
    bridge,
    calculate_total_price_for_bulk_tickets,
    final_number_from_random,
    matching_brackets,
    validate_ticket_number,
)
from luckybox.draw.codec import validate_bracket
from luckybox.errors import (
    BatchTooLarge,
    EmptyPurchase,
    InvalidBracket,
    InvalidTicketNumber,
)


class TestTicketCodec(unittest.TestCase):
    def test_bridge_takes_trailing_digits(self):
        self.assertEqual(bridge(11975, 0), 5)
        self.assertEqual(bridge(11975, 1), 75)
        self.assertEqual(bridge(11975, 2), 975)
        self.assertEqual(bridge(11975, 3), 1975)
        self.assertEqual(bracket_keys(10007), (7, 7, 7, 7))

    def test_bounds_are_inclusive(self):
        self.assertEqual(validate_ticket_number(10000), 10000)
        self.assertEqual(validate_ticket_number(19999), 19999)
        for bad in (9999, 20000, -1, 0):
            with self.subTest(number=bad):
                with self.assertRaises(InvalidTicketNumber):
                    validate_ticket_number(bad)

    def test_non_integers_rejected(self):
        with self.assertRaises(InvalidTicketNumber):
            validate_ticket_number("11111")
        with self.assertRaises(InvalidTicketNumber):
            validate_ticket_number(True)

    def test_bracket_range(self):
        self.assertEqual(validate_bracket(3), 3)
        with self.assertRaises(InvalidBracket):
            validate_bracket(4)
        with self.assertRaises(InvalidBracket):
            validate_bracket(-1)

    def test_matching_is_suffix_based(self):
        self.assertEqual(matching_brackets(15975, 11975), [0, 1, 2])
        self.assertEqual(matching_brackets(11975, 11975), [0, 1, 2, 3])
        # Same thousands digit is not a match without the lower digits.
        self.assertEqual(matching_brackets(11970, 11975), [])

    def test_final_number_from_random(self):
        self.assertEqual(final_number_from_random(12345), 12345)
        self.assertEqual(final_number_from_random(0), 10000)
        self.assertEqual(final_number_from_random(2**256 - 1), 10000 + (2**256 - 1) % 10000)
        with self.assertRaises(ValueError):
            final_number_from_random(-5)


class TestBulkPricing(unittest.TestCase):
    def test_single_ticket_costs_unit_price(self):
        self.assertEqual(calculate_total_price_for_bulk_tickets(100, 1), 100)

    def test_discount_grows_with_batch(self):
        self.assertEqual(calculate_total_price_for_bulk_tickets(100, 9), 826)
        self.assertEqual(calculate_total_price_for_bulk_tickets(100, 11), 987)
        self.assertEqual(
            calculate_total_price_for_bulk_tickets(10**18, 2),
            10**18 * 2 * 97 // 98,
        )

    def test_rejects_empty_and_oversized_batches(self):
        with self.assertRaises(EmptyPurchase):
            calculate_total_price_for_bulk_tickets(100, 0)
        with self.assertRaises(BatchTooLarge):
            calculate_total_price_for_bulk_tickets(100, 11, 10)
        with self.assertRaises(BatchTooLarge):
            calculate_total_price_for_bulk_tickets(100, 99)


if __name__ == "__main__":
    unittest.main()
