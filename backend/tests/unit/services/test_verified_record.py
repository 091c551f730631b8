# tests/unit/services/test_verified_record.py
from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import Mock

import pytest

from tokenauth.core.security import RefreshTokenHasher
from tokenauth.services._shared.errors import NotFoundError
from tokenauth.services._shared.ports import AuthRecord, verified


@pytest.fixture
def spy_hasher() -> Mock:
    return Mock(spec=RefreshTokenHasher)


def test_missing_record_runs_dummy_comparison_and_raises(spy_hasher):
    # even a hasher that accepts anything cannot turn a missing record into a hit
    spy_hasher.verify.return_value = True

    with pytest.raises(NotFoundError) as excinfo:
        verified(None, "presented", spy_hasher, op="store.test")

    spy_hasher.verify.assert_called_once_with(None, "presented")
    assert excinfo.value.op == "store.test"


def test_mismatch_raises_not_found(spy_hasher):
    spy_hasher.verify.return_value = False
    record = AuthRecord(user_id="u", refresh_token_hash="stored", updated_at=datetime.now(UTC))

    with pytest.raises(NotFoundError):
        verified(record, "presented", spy_hasher, op="store.test")
    spy_hasher.verify.assert_called_once_with("stored", "presented")


def test_match_returns_record(spy_hasher):
    spy_hasher.verify.return_value = True
    record = AuthRecord(user_id="u", refresh_token_hash="stored", updated_at=datetime.now(UTC))

    assert verified(record, "presented", spy_hasher, op="store.test") is record
