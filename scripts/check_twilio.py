"""Check the Twilio Verify configuration used for phone sign-in.

Usage: python scripts/check_twilio.py
"""

import sys
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parents[1]
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

from app.config import settings  # noqa: E402
from app.services.sms_verification_service import describe_twilio_setup  # noqa: E402


def main() -> int:
    report = describe_twilio_setup(settings)

    print("=== Twilio Configuration Check ===")
    for name, present in report["secrets"].items():
        print(f"{name}: {'set' if present else 'missing'}")

    if report["account"]:
        account = report["account"]
        print(f"Account status: {account['status']}")
        print(f"Account type: {account['type']}")
        print(f"Account name: {account['friendly_name']}")
    if report["error"]:
        print(f"Account check failed: {report['error']}")
    for warning in report["warnings"]:
        print(f"WARNING: {warning}")

    if not report["configured"] or report["error"]:
        print("OTP codes will only appear in the backend log until this is fixed.")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
