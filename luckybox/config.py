"""Environment-driven settings for the lottery."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .models.state import DEFAULT_MAX_NUMBER_TICKETS_EACH_TIME

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LotterySettings:
    """Settings used to initialize the lottery state row.

    Attributes
    ----------
    operator_address : str
        Identity allowed to run privileged operations.
    treasury_address : str
        Recipient of treasury fees.
    max_number_tickets_each_time : int
        Initial per-call purchase cap.
    """

    operator_address: str
    treasury_address: str
    max_number_tickets_each_time: int = DEFAULT_MAX_NUMBER_TICKETS_EACH_TIME

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "LotterySettings":
        """Build settings from ``LOTTERY_*`` environment variables.

        Variables from ``env_file`` (or a ``.env`` found from the working
        directory) are loaded first without overriding the process
        environment.

        Raises
        ------
        ValueError
            If a required variable is missing or the cap is not an integer.
        """

        load_dotenv(env_file)
        operator = os.getenv("LOTTERY_OPERATOR_ADDRESS")
        if not operator:
            raise ValueError("Environment variable 'LOTTERY_OPERATOR_ADDRESS' is not set")
        treasury = os.getenv("LOTTERY_TREASURY_ADDRESS") or operator
        raw_cap = os.getenv("LOTTERY_MAX_TICKETS_EACH_TIME")
        try:
            cap = int(raw_cap) if raw_cap else DEFAULT_MAX_NUMBER_TICKETS_EACH_TIME
        except ValueError as exc:
            raise ValueError(
                f"LOTTERY_MAX_TICKETS_EACH_TIME must be an integer, got {raw_cap!r}"
            ) from exc

        logger.debug("Loaded lottery settings from environment")
        return cls(
            operator_address=operator,
            treasury_address=treasury,
            max_number_tickets_each_time=cap,
        )
