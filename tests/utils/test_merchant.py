"""
Tests for merchant name normalization.
"""

import pytest

from shipmail.utils.merchant import normalize_domain, normalize_merchant_name


class TestNormalizeDomain:
    """Tests for normalize_domain function."""

    @pytest.mark.parametrize("domain", [None, ""])
    def test_empty(self, domain):
        assert normalize_domain(domain) is None

    @pytest.mark.parametrize(
        "domain,expected",
        [
            ("amazon.com", "amazon.com"),
            ("  WWW.Amazon.COM ", "amazon.com"),
            ("shop.nike.com", "nike.com"),
            ("orders.dell.com", "dell.com"),
        ],
    )
    def test_prefix_and_case(self, domain, expected):
        assert normalize_domain(domain) == expected


class TestNormalizeMerchantName:
    """Tests for normalize_merchant_name function."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("AMAZON", "Amazon"),
            ("amzn", "Amazon"),
            ("Amazon.co.uk", "Amazon UK"),
            ("bestbuy.com", "Best Buy"),
            ("ebay", "eBay"),
            ("The Home Depot", "Home Depot"),
        ],
    )
    def test_known_merchants(self, name, expected):
        assert normalize_merchant_name(name) == expected

    def test_domain_fallback(self):
        """An unknown name resolves through the sender domain."""
        assert normalize_merchant_name("Orders", domain="www.nike.com") == "Nike"

    def test_domain_suffix_stripped(self):
        assert normalize_merchant_name("newegg.store") == "Newegg"

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("Best Buy Co.", "Best Buy"),
            ("Dell Inc.", "Dell"),
            ("acme widgets inc", "Acme Widgets"),
            ("Gadget Hub, LLC", "Gadget Hub"),
        ],
    )
    def test_corporate_suffixes(self, name, expected):
        assert normalize_merchant_name(name) == expected

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("TechStore", "TechStore"),
            ("ACME", "Acme"),
            ("HP", "HP"),
            ("dhl express", "DHL Express"),
            ("well-known shop", "Well-Known Shop"),
        ],
    )
    def test_title_case(self, name, expected):
        assert normalize_merchant_name(name) == expected

    def test_empty(self):
        assert normalize_merchant_name("") == ""
