"""Synthetic indexer payloads for dev-mode fallback.

Every payload mirrors the backend's {success, data, timestamp} shape. Values
are derived deterministically from the inputs so repeated fallbacks render the
same data.
"""

from __future__ import annotations

import hashlib
from datetime import datetime, timezone

_MAIL_DOMAIN = "0xmail.box"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _digest(seed: str) -> str:
    return hashlib.sha256(seed.encode("utf-8")).hexdigest()


def _fake_evm_address(seed: str) -> str:
    return "0x" + _digest(seed)[:40]


def _chain_type(address: str) -> str:
    return "evm" if address.lower().startswith("0x") else "solana"


def _envelope(data: dict) -> dict:
    return {"success": True, "data": data, "error": None, "timestamp": _now()}


class IndexerMockData:
    """Factory of synthetic responses, one per fallback-enabled endpoint."""

    @staticmethod
    def get_leaderboard(count: int = 10) -> dict:
        entries = []
        for rank in range(1, max(count, 0) + 1):
            address = _fake_evm_address(f"leaderboard-{rank}")
            entries.append(
                {
                    "walletAddress": address,
                    "chainType": "evm",
                    "pointsEarned": str(10_000 // rank),
                    "rank": rank,
                }
            )
        return _envelope({"leaderboard": entries})

    @staticmethod
    def get_site_stats() -> dict:
        return _envelope(
            {
                "totalPoints": "1250000",
                "totalUsers": 4200,
                "lastUpdated": _now(),
            }
        )

    @staticmethod
    def get_wallet_accounts(wallet_address: str) -> dict:
        chain_type = _chain_type(wallet_address)
        return _envelope(
            {
                "walletAddress": wallet_address,
                "accounts": [
                    {
                        "walletAddress": wallet_address,
                        "addressType": chain_type,
                        "chainType": chain_type,
                        "isPrimary": True,
                        "primaryAccount": f"{wallet_address}@{_MAIL_DOMAIN}",
                        "domainAccounts": [],
                    }
                ],
            }
        )

    @staticmethod
    def get_validate_username(username: str) -> dict:
        return _envelope(
            {
                "isValid": True,
                "address": username,
                "chainType": _chain_type(username),
                "name": None,
            }
        )

    @staticmethod
    def get_referral_stats(referral_code: str) -> dict:
        referred = [
            {
                "walletAddress": _fake_evm_address(f"{referral_code}-{i}"),
                "chainType": "evm",
                "createdAt": _now(),
            }
            for i in range(int(_digest(referral_code)[:2], 16) % 4)
        ]
        return _envelope(
            {
                "walletAddress": _fake_evm_address(referral_code),
                "chainType": "evm",
                "referralCode": referral_code,
                "totalReferred": len(referred),
                "referredWallets": referred,
            }
        )

    @staticmethod
    def get_delegated_from(wallet_address: str) -> dict:
        delegators = [
            {
                "delegatorAddress": _fake_evm_address(f"{wallet_address}-delegator-{i}"),
                "delegatorChainType": "evm",
                "delegatedAddress": wallet_address,
                "delegatedChainType": _chain_type(wallet_address),
                "isActive": True,
                "createdAt": _now(),
            }
            for i in range(int(_digest(wallet_address)[:2], 16) % 3 + 1)
        ]
        return _envelope(
            {
                "walletAddress": wallet_address,
                "delegatedFrom": delegators,
                "total": len(delegators),
            }
        )
