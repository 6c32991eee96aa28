import unittest

from quizgate.services.credentials import verify_password
from quizgate.utils.hash import sha256_hex


class VerifyPasswordTest(unittest.TestCase):
    def setUp(self):
        self.stored = sha256_hex("letmein")

    def test_matching_password(self):
        self.assertTrue(verify_password("letmein", self.stored))

    def test_known_digest(self):
        self.assertEqual(
            sha256_hex("abc"),
            "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad",
        )

    def test_rejects_wrong_password(self):
        for attempt in ("letmeout", "LETMEIN", "letmein ", " letmein", "letmein\x00"):
            with self.subTest(attempt=attempt):
                self.assertFalse(verify_password(attempt, self.stored))

    def test_rejects_empty_password(self):
        self.assertFalse(verify_password("", self.stored))
        self.assertFalse(verify_password("", sha256_hex("")))

    def test_rejects_lone_surrogate(self):
        self.assertFalse(verify_password("letmein\udcff", self.stored))

    def test_stored_hash_compared_byte_for_byte(self):
        self.assertFalse(verify_password("letmein", self.stored.upper()))
        self.assertFalse(verify_password("letmein", ""))


if __name__ == "__main__":
    unittest.main()
