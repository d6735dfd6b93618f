"""Referral code consumption, storage and share links."""

from indexer_client.referral.consumption import ReferralConsumption, ReferralState
from indexer_client.referral.share import build_share_url
from indexer_client.referral.storage import (
    JsonFileReferralStorage,
    MemoryReferralStorage,
    ReferralStorage,
)

__all__ = [
    "JsonFileReferralStorage",
    "MemoryReferralStorage",
    "ReferralConsumption",
    "ReferralState",
    "ReferralStorage",
    "build_share_url",
]
