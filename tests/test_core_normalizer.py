"""
Unit tests for customer_matcher.core.matching.normalizer.
"""

import unittest

from customer_matcher.core.matching.normalizer import normalize, tokenize


class TestNormalize(unittest.TestCase):
    def test_documented_examples(self):
        self.assertEqual(normalize("Müller GmbH & Co."), "muller gmbh")
        self.assertEqual(normalize("Ajmal Perfumes, Shop No. 3"), "ajmal perfumes")
        self.assertEqual(normalize("ACME Trading L.L.C. 0501234567"), "acme trading")
        self.assertEqual(normalize("3M Gulf Ltd"), "3m gulf")

    def test_casing_and_whitespace(self):
        self.assertEqual(normalize("  ACME   Trading  "), "acme trading")
        self.assertEqual(normalize("acme\ttrading\n"), "acme trading")

    def test_unicode_folding(self):
        self.assertEqual(normalize("Café Dubaï"), "cafe dubai")
        self.assertEqual(normalize("Straße"), "strasse")

    def test_apostrophes_are_deleted(self):
        self.assertEqual(normalize("Golden Int'l Trading"), "golden intl trading")
        self.assertEqual(normalize("McDonald’s"), "mcdonalds")

    def test_legal_forms_removed(self):
        for raw in ("Acme Trading LLC", "Acme Trading Co.", "Acme Trading Limited", "Acme Trading FZE"):
            with self.subTest(raw=raw):
                self.assertEqual(normalize(raw), "acme trading")

    def test_address_noise_removed(self):
        self.assertEqual(normalize("Star Systems Corp, Shop No. 17"), "star systems")
        self.assertEqual(normalize("Metro Foods, P.O. Box 1234"), "metro foods")

    def test_business_words_kept_without_unit_number(self):
        self.assertEqual(normalize("Office Depot"), "office depot")
        self.assertEqual(normalize("H&R Block"), "h r block")
        self.assertEqual(normalize("Level 3 Communications"), "level 3 communications")
        self.assertEqual(normalize("Acme Office Supplies"), "acme office supplies")
        self.assertEqual(normalize("Room To Read"), "room to read")

    def test_numbered_address_parts_removed(self):
        self.assertEqual(normalize("Acme Trading, Office 12"), "acme trading")
        self.assertEqual(normalize("Acme Trading, Suite No. 4B"), "acme trading")
        self.assertEqual(normalize("Acme Trading Block 7"), "acme trading")

    def test_short_numbers_kept_long_numbers_dropped(self):
        self.assertEqual(normalize("Unit 7 Express"), "express")
        self.assertEqual(normalize("Express 24"), "express 24")
        self.assertEqual(normalize("Express 0501234567"), "express")

    def test_permissive_keeps_legal_forms_and_noise(self):
        self.assertEqual(normalize("Acme Trading LLC", permissive=True), "acme trading llc")
        self.assertEqual(
            normalize("Acme, Shop No. 3 0501234567", permissive=True), "acme shop no 3"
        )

    def test_empty_input(self):
        self.assertEqual(normalize(""), "")
        self.assertEqual(normalize(None), "")
        self.assertEqual(normalize("   "), "")
        self.assertEqual(normalize("LLC"), "")
        self.assertEqual(normalize("..."), "")

    def test_idempotent(self):
        samples = [
            "Müller GmbH & Co.",
            "Ajmal Perfumes, Shop No. 3",
            "ACME Trading L.L.C. 0501234567",
            "po 12345678 box",
            "Level 3 Communications, Shop 5",
            "Acme unit shop 3",
            "Co. Co. Ltd",
            "Royal Int'l Group FZE",
            "İstanbul Textiles",
            "",
        ]
        for raw in samples:
            with self.subTest(raw=raw):
                once = normalize(raw)
                self.assertEqual(normalize(once), once)


class TestTokenize(unittest.TestCase):
    def test_split(self):
        self.assertEqual(tokenize("acme intl trading"), ["acme", "intl", "trading"])

    def test_empty(self):
        self.assertEqual(tokenize(""), [])


if __name__ == "__main__":
    unittest.main()
