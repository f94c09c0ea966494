from jose import jwt

from postgen.core.security import decode_access_token, user_id_from_token


def test_user_id_from_valid_token(token_factory):
    assert user_id_from_token(token_factory("user-42")) == "user-42"

def test_wrong_signature_is_ignored(token_factory):
    assert user_id_from_token(token_factory(secret="not-the-secret")) is None

def test_wrong_audience_is_ignored():
    token = jwt.encode({"sub": "user-42", "aud": "anon"}, "test-jwt-secret", algorithm="HS256")
    assert decode_access_token(token) is None

def test_token_without_subject():
    token = jwt.encode({"aud": "authenticated"}, "test-jwt-secret", algorithm="HS256")
    assert user_id_from_token(token) is None

def test_missing_token():
    assert user_id_from_token(None) is None
    assert user_id_from_token("") is None
