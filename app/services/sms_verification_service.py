"""Twilio Verify adapter used by the phone verification flow.

The adapter is built once at startup when all three Twilio secrets are set.
When any of them is missing no adapter exists and the flow falls back to the
codes it stores itself.
"""

import logging

from fastapi import Request
from twilio.rest import Client

from app.config import settings

logger = logging.getLogger(__name__)

APPROVED = "approved"


class TwilioVerifyProvider:
    def __init__(self, account_sid: str, auth_token: str, service_sid: str, client: Client | None = None):
        self.account_sid = account_sid
        self.service_sid = service_sid
        self.client = client or Client(account_sid, auth_token)

    def _service(self):
        return self.client.verify.v2.services(self.service_sid)

    def start_verification(self, phone: str, channel: str = "sms") -> str:
        """Ask Twilio to send its own code to ``phone``. Returns the verification status."""
        verification = self._service().verifications.create(to=phone, channel=channel)
        logger.info("Verification SMS sent to %s, status=%s", phone, verification.status)
        return verification.status

    def check_verification(self, phone: str, code: str) -> str:
        check = self._service().verification_checks.create(to=phone, code=code)
        logger.info("Verification check for %s: %s", phone, check.status)
        return check.status

    def fetch_account(self) -> dict:
        account = self.client.api.v2010.accounts(self.account_sid).fetch()
        return {
            "status": account.status,
            "type": account.type,
            "friendly_name": account.friendly_name,
        }


def is_rate_limited(error: Exception) -> bool:
    return getattr(error, "status", None) == 429


def build_verification_provider(config=settings) -> TwilioVerifyProvider | None:
    if not config.twilio_configured:
        logger.warning("Twilio Verify not configured. OTP codes will be written to the log.")
        return None
    logger.info("Twilio Verify configured for service %s", config.TWILIO_VERIFY_SERVICE_SID)
    return TwilioVerifyProvider(
        config.TWILIO_ACCOUNT_SID,
        config.TWILIO_AUTH_TOKEN,
        config.TWILIO_VERIFY_SERVICE_SID,
    )


def get_verification_provider(request: Request) -> TwilioVerifyProvider | None:
    return getattr(request.app.state, "verification_provider", None)


def describe_twilio_setup(config=settings, provider: TwilioVerifyProvider | None = None) -> dict:
    """Report which Twilio secrets are present and, when possible, the account state."""
    report = {
        "secrets": {
            "TWILIO_ACCOUNT_SID": bool(config.TWILIO_ACCOUNT_SID),
            "TWILIO_AUTH_TOKEN": bool(config.TWILIO_AUTH_TOKEN),
            "TWILIO_VERIFY_SERVICE_SID": bool(config.TWILIO_VERIFY_SERVICE_SID),
        },
        "configured": config.twilio_configured,
        "account": None,
        "warnings": [],
        "error": None,
    }
    if not config.twilio_configured:
        report["warnings"].append("Missing Twilio credentials; OTP codes are only logged.")
        return report

    provider = provider or build_verification_provider(config)
    try:
        account = provider.fetch_account()
    except Exception as exc:
        logger.exception("Twilio account check failed")
        report["error"] = str(exc)
        return report

    report["account"] = account
    if account["status"] == "suspended":
        report["warnings"].append("Account is suspended.")
    elif account["type"] == "Trial":
        report["warnings"].append("Trial account: SMS can only be sent to verified numbers.")
    return report
