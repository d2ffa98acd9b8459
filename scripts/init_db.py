from __future__ import annotations

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import inspect

from luckybox.config import LotterySettings
from luckybox.db.engine import get_sessionmaker, make_engine
from luckybox.models import LotteryState
from luckybox.workflows import initialize_lottery

logger = logging.getLogger(__name__)


def upgrade_db(target_revision: str = "head") -> None:
    """Apply Alembic migrations up to the requested revision."""
    project_root = Path(__file__).resolve().parents[1]
    alembic_cfg = Config(str(project_root / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(project_root / "alembic"))
    command.upgrade(alembic_cfg, target_revision)


def ensure_lottery_state(engine) -> None:
    """Create the lottery state row from ``LOTTERY_*`` variables if missing."""
    Session = get_sessionmaker(engine)
    with Session.begin() as session:
        state = LotteryState.find(session)
        if state is not None:
            print(f"Lottery already initialized (operator={state.operator_address})")
            return
        settings = LotterySettings.from_env()
        initialize_lottery(session, settings)
        print(f"Lottery initialized for operator {settings.operator_address}")


def main() -> None:
    """Apply migrations, report the schema and initialize the lottery."""
    logging.basicConfig(level=logging.INFO)
    upgrade_db()
    engine = make_engine()
    insp = inspect(engine)
    print("Current tables:", ", ".join(sorted(insp.get_table_names())))
    ensure_lottery_state(engine)


if __name__ == "__main__":
    main()
