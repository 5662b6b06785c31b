"""
Bookshelf API — User Model Unit Tests
======================================

What we test:
    ✅ Company domains count as professional addresses
    ✅ Consumer mailbox providers do not
    ✅ Domain comparison ignores case
    ✅ An address without "@" or without a domain is not professional
"""

from bookshelf.models.user import User


class TestProfessionalEmail:

    def test_company_domain_is_professional(self):
        user = User(name="John", email="john@entreprise.com", password="x")
        assert user.uses_professional_email() is True

    def test_gmail_is_not_professional(self):
        user = User(name="John", email="john@gmail.com", password="x")
        assert user.uses_professional_email() is False

    def test_free_domain_match_is_case_insensitive(self):
        user = User(name="John", email="john@GMAIL.com", password="x")
        assert user.uses_professional_email() is False

    def test_address_without_domain_is_not_professional(self):
        user = User(name="John", email="john", password="x")
        assert user.uses_professional_email() is False

    def test_trailing_at_sign_is_not_professional(self):
        user = User(name="John", email="john@", password="x")
        assert user.uses_professional_email() is False
