import logging

from luckybox.config import LotterySettings
from luckybox.db.engine import get_sessionmaker, make_engine
from luckybox.ledger import SqlLedger
from luckybox.lottery import ClaimEngine, LotteryEngine, OperatorContext
from luckybox.lottery.context import system_clock
from luckybox.models import Base
from luckybox.randomness import DeterministicRandomness
from luckybox.workflows import close_and_draw, initialize_lottery

OPERATOR = "operator"
TREASURY = "treasury"
PLAYERS = {
    "alice": [11111, 11115, 11175, 11975],
    "bob": [15975, 19557, 15111],
    "carol": [19571, 17559],
}
TICKET_PRICE = 100
STARTING_BALANCE = 10_000
ROUND_LENGTH = 3600


def main() -> None:
    """Reset the development database and play one full round."""
    logging.basicConfig(level=logging.INFO)
    engine = make_engine()

    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    Session = get_sessionmaker(engine)
    operator = OperatorContext(OPERATOR)
    # Scripted so the sample round has a winner in every bracket.
    randomness = DeterministicRandomness([11975])

    with Session.begin() as session:
        initialize_lottery(
            session,
            LotterySettings(operator_address=OPERATOR, treasury_address=TREASURY),
            randomness,
        )
        ledger = SqlLedger(session)
        for player in PLAYERS:
            ledger.mint(player, STARTING_BALANCE)

        lottery = LotteryEngine(session, randomness=randomness, ledger=ledger)
        lottery_round = lottery.start_round(
            operator,
            end_time=system_clock() + ROUND_LENGTH,
            ticket_price=TICKET_PRICE,
            rewards_breakdown=[1000, 2000, 3000, 4000],
            treasury_fee=0,
        )
        for player, numbers in PLAYERS.items():
            lottery.buy_tickets(player, numbers)

        info = close_and_draw(lottery, operator, lottery_round.id, force=True)
        print(f"Round {lottery_round.id} drew {info.final_number}")

        claims = ClaimEngine(session, ledger=ledger)
        for player in PLAYERS:
            receipt = claims.claim_all_tickets(player, lottery_round.id)
            print(f"{player} claimed {receipt.total_reward} for {len(receipt.tickets)} tickets")

    print("Development database seeded.")


if __name__ == "__main__":
    main()
