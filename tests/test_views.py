from __future__ import annotations

import unittest

from lottery_fixtures import NUMBERS, LotteryTestCase
from luckybox.errors import InvalidBracket, RoundNotOpen, TicketOutOfRange
from luckybox.lottery.views import (
    quote_ticket_price,
    view_current_round_id,
    view_numbers_and_statuses_for_ticket_ids,
    view_round,
    view_rounds,
    view_rewards_for_ticket_id,
    view_wallet_ticket_ids,
)
from luckybox.models import RoundStatus


class LotteryViewTests(LotteryTestCase):
    randomness_values = [1975, 2222, 3333]

    def test_unknown_round_reads_as_pending(self):
        info = view_round(self.session, 7)
        self.assertEqual(info.round_id, 7)
        self.assertEqual(info.status, RoundStatus.PENDING)
        self.assertEqual(info.reward_per_ticket_per_bracket, (0, 0, 0, 0))
        self.assertEqual(view_current_round_id(self.session), 0)

    def test_round_snapshot_after_draw(self):
        lottery_round, _ = self.play_sample_round()
        info = view_round(self.session, lottery_round.id)

        self.assertEqual(view_current_round_id(self.session), 1)
        self.assertEqual(info.status, RoundStatus.CLAIMABLE)
        self.assertEqual(info.final_number, 11975)
        self.assertEqual(info.amount_collected, 826)
        self.assertEqual(info.count_winners_per_bracket, (4, 3, 2, 1))
        self.assertEqual(info.reward_per_bracket, (80, 165, 246, 330))
        self.assertEqual(info.first_ticket_id_next_round, 9)
        self.assertEqual(view_round(self.session, lottery_round.id), info)

    def test_wallet_tickets_and_statuses(self):
        self.start_round()
        self.lottery.buy_tickets("alice", NUMBERS[:3])
        self.lottery.buy_tickets("bob", [12345])
        self.lottery.buy_tickets("alice", [19999])

        self.assertEqual(view_wallet_ticket_ids(self.session, "alice", 1), [0, 1, 2, 4])
        self.assertEqual(view_wallet_ticket_ids(self.session, "bob", 1), [3])
        self.assertEqual(view_wallet_ticket_ids(self.session, "alice", 2), [])

        numbers, statuses = view_numbers_and_statuses_for_ticket_ids(self.session, [4, 3])
        self.assertEqual(numbers, [19999, 12345])
        self.assertEqual(statuses, [False, False])
        with self.assertRaises(TicketOutOfRange):
            view_numbers_and_statuses_for_ticket_ids(self.session, [5])

    def test_rewards_view_is_idempotent(self):
        lottery_round = self.start_round()
        self.lottery.buy_tickets("alice", NUMBERS)
        self.assertEqual(view_rewards_for_ticket_id(self.session, lottery_round.id, 3, 3), 0)

        self.close_and_draw(lottery_round.id)
        first = view_rewards_for_ticket_id(self.session, lottery_round.id, 3, 3)
        second = view_rewards_for_ticket_id(self.session, lottery_round.id, 3, 3)
        self.assertEqual(first, 330)
        self.assertEqual(first, second)
        self.assertEqual(view_rewards_for_ticket_id(self.session, lottery_round.id, 0, 0), 0)
        self.assertEqual(view_rewards_for_ticket_id(self.session, lottery_round.id, 99, 0), 0)
        with self.assertRaises(InvalidBracket):
            view_rewards_for_ticket_id(self.session, lottery_round.id, 3, 4)

        # Claimed tickets still report their reward.
        self.claims.claim_ticket("alice", lottery_round.id, 3, 3)
        self.assertEqual(view_rewards_for_ticket_id(self.session, lottery_round.id, 3, 3), 330)
        _, statuses = view_numbers_and_statuses_for_ticket_ids(self.session, [3])
        self.assertEqual(statuses, [True])

    def test_rounds_pagination(self):
        for _ in range(3):
            lottery_round = self.start_round()
            self.clock.advance(3600)
            self.lottery.close_round(self.operator, lottery_round.id)

        self.assertEqual([r.round_id for r in view_rounds(self.session)], [1, 2, 3])
        self.assertEqual(
            [r.round_id for r in view_rounds(self.session, offset=1, limit=1)], [2]
        )
        with self.assertRaises(ValueError):
            view_rounds(self.session, limit=0)
        with self.assertRaises(ValueError):
            view_rounds(self.session, offset=-1)

    def test_price_quote(self):
        with self.assertRaises(RoundNotOpen):
            quote_ticket_price(self.session, 1)
        self.start_round(ticket_price=100)
        self.assertEqual(quote_ticket_price(self.session, 9), 826)
        self.assertEqual(quote_ticket_price(self.session, 1, round_id=1), 100)

    def test_price_quote_requires_open_round(self):
        lottery_round = self.start_round(ticket_price=100)
        self.lottery.close_round(self.operator, lottery_round.id, force=True)
        with self.assertRaises(RoundNotOpen):
            quote_ticket_price(self.session, 1)

        self.lottery.draw_final_number_and_make_claimable(self.operator, lottery_round.id)
        with self.assertRaises(RoundNotOpen):
            quote_ticket_price(self.session, 1, round_id=lottery_round.id)


if __name__ == "__main__":
    unittest.main()
