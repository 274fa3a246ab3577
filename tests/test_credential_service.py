import string
import unittest

from portal.application.services.credential_service import (
    SECRET_ALPHABET,
    generate_secret,
    hash_secret,
    verify_secret,
)


class TestCredentialHasher(unittest.TestCase):
    def test_known_digest(self):
        """SHA-256 of 'abc' as lowercase hex"""
        self.assertEqual(
            hash_secret("abc"),
            "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad",
        )

    def test_deterministic_fixed_length_hex(self):
        self.assertEqual(hash_secret("abc"), hash_secret("abc"))
        for secret in ("", "a", "pässwörd", "x" * 500):
            digest = hash_secret(secret)
            self.assertEqual(len(digest), 64)
            self.assertTrue(set(digest) <= set(string.hexdigits.lower()))

    def test_no_collisions_over_sample(self):
        inputs = [f"secret-{i}" for i in range(10_000)]
        digests = {hash_secret(s) for s in inputs}
        self.assertEqual(len(digests), len(inputs))

    def test_verify(self):
        digest = hash_secret("hunter22")
        self.assertTrue(verify_secret("hunter22", digest))
        self.assertTrue(verify_secret("hunter22", digest.upper()))
        self.assertFalse(verify_secret("hunter23", digest))
        self.assertFalse(verify_secret("hunter22", ""))
        self.assertFalse(verify_secret("hunter22", "not-a-digest"))

    def test_generated_secret(self):
        secret = generate_secret()
        self.assertEqual(len(secret), 12)
        self.assertTrue(set(secret) <= set(SECRET_ALPHABET))
        self.assertEqual(len(generate_secret(20)), 20)
        self.assertNotEqual(generate_secret(), generate_secret())
