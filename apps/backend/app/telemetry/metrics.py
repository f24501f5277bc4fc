from __future__ import annotations

from prometheus_client import Counter

tokens_issued_total = Counter(
    "sessionguard_tokens_issued_total",
    "Refresh tokens minted",
    ["origin"],
)

token_rotations_total = Counter(
    "sessionguard_token_rotations_total",
    "Refresh token rotation attempts by outcome",
    ["outcome"],
)

tokens_revoked_total = Counter(
    "sessionguard_tokens_revoked_total",
    "Refresh tokens revoked by reason",
    ["reason"],
)
