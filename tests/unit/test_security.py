"""
Unit tests for bearer tokens and public link tokens
"""
import uuid
from datetime import timedelta

import pytest
from jose import jwt

from homerecall.app.config import settings
from homerecall.core.security import (
    create_access_token,
    generate_public_token,
    owner_id_from_token,
)


@pytest.mark.unit
class TestAccessTokens:

    def test_round_trip(self):
        owner_id = uuid.uuid4()
        assert owner_id_from_token(create_access_token(owner_id)) == owner_id

    def test_expired_token(self):
        token = create_access_token(uuid.uuid4(), expires_delta=timedelta(seconds=-5))
        assert owner_id_from_token(token) is None

    def test_tampered_token(self):
        token = create_access_token(uuid.uuid4())
        assert owner_id_from_token(token[:-2] + "xx") is None

    def test_wrong_token_type(self):
        token = jwt.encode(
            {"sub": str(uuid.uuid4()), "type": "refresh"},
            settings.JWT_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM,
        )
        assert owner_id_from_token(token) is None

    def test_subject_must_be_uuid(self):
        token = jwt.encode(
            {"sub": "owner@example.com", "type": "access"},
            settings.JWT_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM,
        )
        assert owner_id_from_token(token) is None


@pytest.mark.unit
def test_public_tokens_are_unique():
    tokens = {generate_public_token() for _ in range(100)}
    assert len(tokens) == 100
    assert all(len(t) >= 32 for t in tokens)
