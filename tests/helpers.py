"""Constants and small helpers shared by the test modules."""

TEST_SECRET = "test-secret-long-enough-for-hs256-signing"
MASTER_EMAIL = "master@example.com"


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
