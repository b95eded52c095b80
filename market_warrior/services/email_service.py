"""
Transactional and campaign email via Resend
"""
import logging
import time
from datetime import datetime, timezone
from html import escape
from typing import Dict, List, Optional, Tuple

import resend

from market_warrior.config import Settings

logger = logging.getLogger(__name__)

CAMPAIGN_BATCH_SIZE = 50
CAMPAIGN_BATCH_PAUSE_SECONDS = 1.0


def _layout(heading: str, body_html: str) -> str:
    year = datetime.now(timezone.utc).year
    return f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
      <div style="background: #667eea; padding: 32px; text-align: center; border-radius: 12px 12px 0 0;">
        <h1 style="color: white; margin: 0;">{heading}</h1>
      </div>
      <div style="padding: 32px; background: #f8fafc;">
        {body_html}
      </div>
      <div style="padding: 20px; text-align: center;">
        <p style="color: #6b7280; font-size: 12px; margin: 0;">&copy; {year} Market Warrior. All rights reserved.</p>
      </div>
    </div>
    """


def _button(url: str, label: str) -> str:
    return (
        f'<a href="{url}" style="display: inline-block; padding: 14px 28px; background: #667eea; '
        f'color: white; text-decoration: none; border-radius: 8px; font-weight: bold;">{label}</a>'
    )


class EmailService:
    """
    Thin wrapper around the Resend SDK

    Sending is best-effort: failures are logged and reported as False,
    never raised into the request that triggered them.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.enabled = bool(settings.RESEND_API_KEY)
        if self.enabled:
            resend.api_key = settings.RESEND_API_KEY
        else:
            logger.warning("RESEND_API_KEY not configured. Emails disabled.")

    def send_email(self, to: str, subject: str, html: str) -> bool:
        if not self.enabled:
            logger.info(f"Email skipped (no API key): {subject}")
            return False

        try:
            resend.Emails.send({
                "from": self.settings.FROM_EMAIL,
                "to": to,
                "subject": subject,
                "html": html,
            })
            logger.info(f"Email sent to {to}: {subject}")
            return True
        except Exception as e:
            logger.error(f"Email to {to} failed: {str(e)}")
            return False

    def send_welcome_email(self, to: str, name: Optional[str]) -> bool:
        body = (
            f'<p style="font-size: 18px;">Hey {escape(name or "Trader")}!</p>'
            "<p>Congratulations on taking the first step toward becoming a better trader! "
            "Your 30-day journey starts now. Day 1 is unlocked.</p>"
            + _button(f"{self.settings.APP_URL}/dashboard", "Start Day 1 &rarr;")
        )
        return self.send_email(to, "Welcome to Market Warrior!", _layout("Welcome to Market Warrior!", body))

    def send_completion_email(self, to: str, name: Optional[str]) -> bool:
        body = (
            f'<p style="font-size: 18px;">Congratulations, {escape(name or "Trader")}!</p>'
            "<p>You've successfully completed the 30-Day Market Warrior Challenge!</p>"
            + _button(f"{self.settings.APP_URL}/certificate", "View Your Certificate &rarr;")
        )
        return self.send_email(
            to,
            "Congratulations! You completed the 30-Day Challenge!",
            _layout("Challenge Complete!", body),
        )

    def send_journal_template_email(self, to: str, name: Optional[str]) -> bool:
        greeting = f"Hey {escape(name)}!" if name else "Hey!"
        body = (
            f'<p style="font-size: 18px;">{greeting}</p>'
            "<p>Thank you for signing up! Here's your free trading journal template to help "
            "you track trades, P&amp;L, emotions and strategy notes.</p>"
            "<p>Ready to take your trading to the next level? Join the 30-Day Market Warrior Challenge!</p>"
            + _button(self.settings.APP_URL, "Learn More &rarr;")
        )
        return self.send_email(to, "Your Free Trading Journal Template", _layout("Your Trading Journal", body))

    def personalize(self, template: str, recipient: Dict[str, Optional[str]], html: bool = True) -> str:
        """Fill placeholders; recipient values are HTML-escaped unless html=False"""
        quote = escape if html else str
        return (
            template
            .replace("{name}", quote(recipient.get("full_name") or "Trader"))
            .replace("{email}", quote(recipient.get("email") or ""))
            .replace("{app_url}", self.settings.APP_URL)
        )

    def send_campaign(
        self,
        recipients: List[Dict[str, Optional[str]]],
        subject: str,
        content: str,
        pause_seconds: float = CAMPAIGN_BATCH_PAUSE_SECONDS,
    ) -> Tuple[int, List[str]]:
        """
        Send a personalised campaign in batches

        Returns:
            Tuple of (sent_count, failed_emails)
        """
        sent = 0
        failed: List[str] = []

        for start in range(0, len(recipients), CAMPAIGN_BATCH_SIZE):
            batch = recipients[start:start + CAMPAIGN_BATCH_SIZE]
            for recipient in batch:
                html = _layout("Market Warrior", self.personalize(content, recipient))
                if self.send_email(recipient["email"], self.personalize(subject, recipient, html=False), html):
                    sent += 1
                else:
                    failed.append(recipient["email"])

            # Stay under the provider's rate limit
            if start + CAMPAIGN_BATCH_SIZE < len(recipients) and pause_seconds:
                time.sleep(pause_seconds)

        logger.info(f"Campaign '{subject}': sent={sent}, failed={len(failed)}")
        return sent, failed
