from __future__ import annotations

import unittest
from typing import Optional, Sequence

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from luckybox.config import LotterySettings
from luckybox.ledger import SqlLedger
from luckybox.lottery import ClaimEngine, LotteryEngine, OperatorContext
from luckybox.models import Base
from luckybox.randomness import DeterministicRandomness
from luckybox.workflows import initialize_lottery

OPERATOR = "operator-wallet"
TREASURY = "treasury-wallet"
START_TIME = 1_700_000_000
ROUND_LENGTH = 3600
BREAKDOWN = [1000, 2000, 3000, 4000]
NUMBERS = [11111, 11115, 11175, 11975, 15975, 19557, 15111, 19571, 17559]


class FakeClock:
    def __init__(self, now: int = START_TIME) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


class LotteryTestCase(unittest.TestCase):
    """Sets up an in-memory lottery with a funded ``alice`` and ``bob``."""

    randomness_values: Optional[Sequence[int]] = None
    auto_fulfill = True

    def setUp(self) -> None:
        self.engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
        Base.metadata.create_all(self.engine)
        self.Session = sessionmaker(
            bind=self.engine, future=True, expire_on_commit=False
        )
        self.session = self.Session()
        self.clock = FakeClock()
        self.randomness = DeterministicRandomness(
            self.randomness_values, auto_fulfill=self.auto_fulfill
        )
        self.operator = OperatorContext(OPERATOR)
        initialize_lottery(
            self.session,
            LotterySettings(operator_address=OPERATOR, treasury_address=TREASURY),
            self.randomness,
        )
        self.ledger = SqlLedger(self.session)
        self.ledger.mint("alice", 10_000)
        self.ledger.mint("bob", 10_000)
        self.ledger.mint(OPERATOR, 10_000)
        self.lottery = LotteryEngine(
            self.session,
            randomness=self.randomness,
            ledger=self.ledger,
            clock=self.clock,
        )
        self.claims = ClaimEngine(self.session, ledger=self.ledger)

    def tearDown(self) -> None:
        self.session.close()
        self.engine.dispose()

    def start_round(self, **overrides):
        params = dict(
            end_time=self.clock.now + ROUND_LENGTH,
            ticket_price=100,
            rewards_breakdown=BREAKDOWN,
            treasury_fee=0,
        )
        params.update(overrides)
        return self.lottery.start_round(self.operator, **params)

    def close_and_draw(self, round_id: int, auto_inject: bool = True):
        self.clock.advance(ROUND_LENGTH)
        self.lottery.close_round(self.operator, round_id)
        return self.lottery.draw_final_number_and_make_claimable(
            self.operator, round_id, auto_inject
        )

    def play_sample_round(self, **overrides):
        """Open a round, sell ``NUMBERS`` to alice and draw it."""

        lottery_round = self.start_round(**overrides)
        self.lottery.buy_tickets("alice", NUMBERS)
        settlement = self.close_and_draw(lottery_round.id)
        return lottery_round, settlement
