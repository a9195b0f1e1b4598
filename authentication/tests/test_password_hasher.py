import pytest
from django.contrib.auth.hashers import make_password

from authentication.infra.security import DjangoPasswordHasher


@pytest.mark.unit
class TestDjangoPasswordHasher:
    def setup_method(self):
        self.hasher = DjangoPasswordHasher()

    def test_hash_is_salted(self):
        first = self.hasher.hash("secret123")
        second = self.hasher.hash("secret123")

        assert first != second
        assert self.hasher.verify("secret123", first)
        assert self.hasher.verify("secret123", second)

    def test_wrong_password(self):
        assert not self.hasher.verify("nope", self.hasher.hash("secret123"))

    def test_unusable_credentials_never_verify(self):
        assert not self.hasher.verify("", make_password(None))
        assert not self.hasher.verify("secret123", "")
