from functools import lru_cache

from attendance_engine.api.checkin_tokens.issuer import TokenIssuer
from attendance_engine.api.checkin_tokens.verifier import TokenVerifier
from attendance_engine.core.config import EngineConfig


@lru_cache()
def get_engine_config() -> EngineConfig:
    return EngineConfig.from_settings()


@lru_cache()
def get_token_issuer() -> TokenIssuer:
    return TokenIssuer(get_engine_config())


@lru_cache()
def get_token_verifier() -> TokenVerifier:
    return TokenVerifier(get_engine_config())
