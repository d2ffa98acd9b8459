import unittest
from collections import Counter

from luckybox.draw import bracket_keys, settle_draw
from luckybox.draw.settlement import validate_rewards_breakdown, validate_treasury_fee
from luckybox.errors import RewardBreakdownTooHigh, TreasuryFeeTooHigh

SAMPLE_NUMBERS = [11111, 11115, 11175, 11975, 15975, 19557, 15111, 19571, 17559]


def histogram(numbers):
    counts = Counter()
    for number in numbers:
        for bracket, key in enumerate(bracket_keys(number)):
            counts[(bracket, key)] += 1
    return lambda bracket, key: counts[(bracket, key)]


class TestSettleDraw(unittest.TestCase):
    def test_every_bracket_active(self):
        settlement = settle_draw(
            11975, 826, [1000, 2000, 3000, 4000], 0, histogram(SAMPLE_NUMBERS)
        )
        self.assertEqual(settlement.winner_counts, [4, 3, 2, 1])
        self.assertEqual(settlement.rewards_per_ticket, [20, 55, 123, 330])
        self.assertEqual(settlement.reward_totals, [80, 165, 246, 330])
        self.assertEqual(settlement.treasury_amount, 0)
        self.assertEqual(settlement.rollover_amount, 5)
        self.assertTrue(settlement.is_balanced())

    def test_empty_brackets_bridge_down(self):
        settlement = settle_draw(
            12345, 826, [1000, 2000, 3000, 4000], 0, histogram(SAMPLE_NUMBERS)
        )
        self.assertEqual(settlement.winner_counts, [4, 0, 0, 0])
        first = settlement.brackets[0]
        self.assertEqual(first.share_bps, 10000)
        self.assertEqual(first.reward_per_ticket, 206)
        self.assertEqual(settlement.reward_totals, [824, 0, 0, 0])
        self.assertEqual(settlement.rollover_amount, 2)
        self.assertFalse(settlement.brackets[3].active)

    def test_carried_share_stops_at_first_active_bracket(self):
        settlement = settle_draw(
            11975, 10000, [1000, 2000, 3000, 4000], 0, histogram([12275, 12225, 11115])
        )
        self.assertEqual(settlement.winner_counts, [3, 1, 0, 0])
        self.assertEqual([b.share_bps for b in settlement.brackets], [1000, 9000, 0, 0])
        self.assertEqual(settlement.reward_totals, [999, 9000, 0, 0])
        self.assertEqual(settlement.rollover_amount, 1)

    def test_treasury_fee_taken_first(self):
        settlement = settle_draw(
            11975, 826, [1000, 2000, 3000, 4000], 2000, histogram(SAMPLE_NUMBERS)
        )
        self.assertEqual(settlement.treasury_amount, 165)
        self.assertEqual(settlement.rewards_per_ticket, [16, 44, 99, 264])
        self.assertEqual(settlement.distributed_amount, 658)
        self.assertEqual(settlement.rollover_amount, 3)
        self.assertTrue(settlement.is_balanced())

    def test_unassigned_breakdown_rolls_over(self):
        settlement = settle_draw(
            11975, 10000, [250, 375, 625, 1250], 0, histogram([11975])
        )
        self.assertEqual(settlement.reward_totals, [250, 375, 625, 1250])
        self.assertEqual(settlement.rollover_amount, 7500)

    def test_no_winners_rolls_whole_pool_over(self):
        settlement = settle_draw(
            10000, 1000, [1000, 2000, 3000, 4000], 500, histogram(SAMPLE_NUMBERS)
        )
        self.assertEqual(settlement.winner_counts, [0, 0, 0, 0])
        self.assertEqual(settlement.treasury_amount, 50)
        self.assertEqual(settlement.rollover_amount, 950)

    def test_empty_round(self):
        settlement = settle_draw(12345, 0, [1000, 2000, 3000, 4000], 0, lambda b, k: 0)
        self.assertEqual(settlement.distributed_amount, 0)
        self.assertEqual(settlement.rollover_amount, 0)
        self.assertTrue(settlement.is_balanced())

    def test_large_amounts_stay_exact(self):
        collected = 7 * 10**24 + 3
        settlement = settle_draw(
            11975, collected, [1000, 2000, 3000, 4000], 1000, histogram(SAMPLE_NUMBERS)
        )
        self.assertTrue(settlement.is_balanced())
        for result in settlement.brackets:
            self.assertEqual(result.reward_total, result.reward_per_ticket * result.winner_count)


class TestSettlementValidation(unittest.TestCase):
    def test_breakdown_checks(self):
        self.assertEqual(validate_rewards_breakdown((0, 0, 0, 10000)), [0, 0, 0, 10000])
        with self.assertRaises(RewardBreakdownTooHigh):
            validate_rewards_breakdown([1000, 2000, 3000, 4001])
        with self.assertRaises(ValueError):
            validate_rewards_breakdown([1000, 2000, 3000])
        with self.assertRaises(ValueError):
            validate_rewards_breakdown([-1, 2000, 3000, 4000])

    def test_treasury_fee_cap(self):
        self.assertEqual(validate_treasury_fee(3000), 3000)
        with self.assertRaises(TreasuryFeeTooHigh):
            validate_treasury_fee(3001)
        with self.assertRaises(ValueError):
            validate_treasury_fee(-1)


if __name__ == "__main__":
    unittest.main()
