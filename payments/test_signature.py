import hashlib

from django.test import SimpleTestCase

from .signature import canonical_encode, encode_pairs, sign, verify


def md5(text: str) -> str:
    return hashlib.md5(text.encode("utf-8")).hexdigest()


class CanonicalEncodeTests(SimpleTestCase):
    def test_sorts_keys_and_drops_blank_values(self):
        params = {"name_first": "Jane", "amount": "150.00", "custom_str1": "", "email_address": "  "}
        self.assertEqual(canonical_encode(params), "amount=150.00&name_first=Jane")

    def test_spaces_become_plus(self):
        self.assertEqual(canonical_encode({"item_name": "LocalsZA Order 12345678"}), "item_name=LocalsZA+Order+12345678")

    def test_matches_encode_uri_component(self):
        params = {"a": "it's (ok)!*~", "b": "x&y=z/w", "c": "café"}
        self.assertEqual(
            canonical_encode(params),
            "a=it's+(ok)!*~&b=x%26y%3Dz%2Fw&c=caf%C3%A9",
        )

    def test_same_output_for_any_insertion_order(self):
        first = {"merchant_id": "10000100", "amount": "10.00", "item_name": "Box of apples"}
        second = {"item_name": "Box of apples", "merchant_id": "10000100", "amount": "10.00"}
        self.assertEqual(canonical_encode(first), canonical_encode(second))

    def test_no_trailing_separator(self):
        self.assertFalse(canonical_encode({"a": "1", "b": "2"}).endswith("&"))
        self.assertEqual(canonical_encode({}), "")

    def test_encode_pairs_keeps_given_order(self):
        self.assertEqual(encode_pairs([("z", "1"), ("a", "two words")]), "z=1&a=two+words")


class SignTests(SimpleTestCase):
    params = {"merchant_id": "10000100", "amount": "150.00", "item_name": "LocalsZA Order abc123"}

    def test_md5_of_canonical_string(self):
        expected = md5("amount=150.00&item_name=LocalsZA+Order+abc123&merchant_id=10000100")
        self.assertEqual(sign(self.params), expected)

    def test_passphrase_appended_last(self):
        expected = md5("amount=150.00&item_name=LocalsZA+Order+abc123&merchant_id=10000100&passphrase=jt7NOE43FZPn+x")
        self.assertEqual(sign(self.params, "jt7NOE43FZPn x"), expected)

    def test_empty_passphrase_means_no_suffix(self):
        self.assertEqual(sign(self.params, ""), sign(self.params))
        self.assertEqual(sign(self.params, "   "), sign(self.params))
        self.assertEqual(sign(self.params, None), sign(self.params))

    def test_digest_is_32_lowercase_hex(self):
        digest = sign(self.params)
        self.assertRegex(digest, r"^[0-9a-f]{32}$")


class VerifyTests(SimpleTestCase):
    params = {"m_payment_id": "abc123", "payment_status": "COMPLETE", "pf_payment_id": "1089250"}

    def test_round_trip(self):
        for passphrase in ("", "salt and pepper"):
            digest = sign(self.params, passphrase)
            received = {**self.params, "signature": digest}
            self.assertTrue(verify(received, digest, passphrase))

    def test_tampered_value_fails(self):
        digest = sign(self.params)
        for key in self.params:
            received = {**self.params, key: self.params[key] + "0", "signature": digest}
            self.assertFalse(verify(received, digest), key)

    def test_extra_field_fails(self):
        digest = sign(self.params)
        received = {**self.params, "amount_gross": "150.00", "signature": digest}
        self.assertFalse(verify(received, digest))

    def test_wrong_passphrase_fails(self):
        digest = sign(self.params, "secret")
        self.assertFalse(verify({**self.params, "signature": digest}, digest, "other"))

    def test_missing_or_garbage_signature_fails_quietly(self):
        self.assertFalse(verify(self.params, ""))
        self.assertFalse(verify(self.params, None))
        self.assertFalse(verify(self.params, "ünïcödé"))
