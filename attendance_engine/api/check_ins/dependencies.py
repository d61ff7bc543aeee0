from functools import lru_cache

from attendance_engine.api.check_ins.coordinator import CheckInCoordinator
from attendance_engine.api.check_ins.notifier import AnomalyNotifier
from attendance_engine.api.checkin_tokens.dependencies import (
    get_engine_config,
    get_token_verifier,
)


@lru_cache()
def get_coordinator() -> CheckInCoordinator:
    return CheckInCoordinator(
        get_engine_config(),
        get_token_verifier(),
        notifier=AnomalyNotifier.from_settings(),
    )
