import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from app.auth import decode_jwt, encode_jwt, issue_token  # noqa: E402


class JwtTests(unittest.TestCase):
    def test_issued_token_round_trips(self) -> None:
        payload = decode_jwt(issue_token("u-founder"))

        self.assertEqual(payload["sub"], "u-founder")
        self.assertGreater(payload["exp"], payload["iat"])

    def test_tampered_payload_is_rejected(self) -> None:
        header, _, signature = issue_token("u-founder").split(".")
        forged = encode_jwt({"sub": "u-admin"}).split(".")[1]

        with self.assertRaises(ValueError):
            decode_jwt(f"{header}.{forged}.{signature}")

    def test_expired_token_is_rejected(self) -> None:
        with self.assertRaisesRegex(ValueError, "expired"):
            decode_jwt(issue_token("u-founder", ttl_minutes=-5))

    def test_garbage_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            decode_jwt("not-a-jwt")

    def test_non_ascii_signature_is_rejected(self) -> None:
        header, payload, _ = issue_token("u-founder").split(".")

        with self.assertRaisesRegex(ValueError, "signature"):
            decode_jwt(f"{header}.{payload}.\u00e9t\u00e9")


if __name__ == "__main__":
    unittest.main()
