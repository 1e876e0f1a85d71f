import asyncio
import logging
import smtplib
import ssl
from email.message import EmailMessage

from src.app.services.notifier import INotifier, NotifierError

logger = logging.getLogger(__name__)

EMAIL_HTML = """\
<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>{app_name} - Password Reset</title>
</head>
<body style="margin:0;padding:0;background-color:#2c2c2c;font-family:-apple-system,Segoe UI,Roboto,Helvetica,Arial,sans-serif;">
  <div style="max-width:600px;margin:40px auto;padding:20px;">
    <div style="background-color:#1f1f1f;border-radius:18px;padding:36px 32px;">
      <h2 style="margin:0 0 14px;font-size:22px;color:#ffffff;">Password reset</h2>
      <p style="font-size:15px;line-height:1.7;color:#d0d0d0;">
        We received a request to reset the password for your {app_name} account.
        Use the one-time code below to continue.
      </p>
      <div style="background-color:#9ecf98;color:#1f1f1f;font-size:34px;font-weight:700;text-align:center;padding:22px 0;border-radius:14px;letter-spacing:10px;margin:32px 0;">{code}</div>
      <p style="text-align:center;font-size:14px;color:#bdbdbd;">
        This code expires in <strong>{expires_in_minutes} minutes</strong>.
      </p>
      <p style="font-size:14px;color:#bdbdbd;">
        If you didn't request this password reset, no action is required.
        Your account will remain secure.
      </p>
    </div>
  </div>
</body>
</html>
"""

EMAIL_TEXT = (
    "Your password reset OTP is: {code}\n\n"
    "This code will expire in {expires_in_minutes} minutes.\n\n"
    "If you didn't request this, please ignore this email."
)


class SmtpNotifier(INotifier):
    """
    Sends the reset code by email over SMTP.

    Port 465 uses implicit TLS, any other port STARTTLS. smtplib is blocking,
    so the send runs in a worker thread.
    """

    def __init__(
        self,
        host: str,
        port: int = 587,
        user: str = "",
        password: str = "",
        from_email: str = "",
        app_name: str = "Password Reset Service",
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.from_email = from_email or user
        self.app_name = app_name
        self.timeout = timeout

    @classmethod
    def from_config(cls, config) -> "SmtpNotifier":
        return cls(
            host=config.SMTP_HOST,
            port=config.SMTP_PORT,
            user=config.SMTP_USER,
            password=config.SMTP_PASSWORD,
            from_email=config.SMTP_FROM_EMAIL,
            app_name=config.APP_NAME,
            timeout=config.EXTERNAL_CALL_TIMEOUT_SECONDS,
        )

    def build_message(self, email: str, code: str, expires_in_minutes: int) -> EmailMessage:
        params = {
            "app_name": self.app_name,
            "code": code,
            "expires_in_minutes": expires_in_minutes,
        }
        message = EmailMessage()
        message["From"] = self.from_email
        message["To"] = email
        message["Subject"] = f"Your Password Reset Code: {code}"
        message.set_content(EMAIL_TEXT.format(**params))
        message.add_alternative(EMAIL_HTML.format(**params), subtype="html")
        return message

    async def send(self, email: str, code: str, expires_in_minutes: int) -> None:
        if not self.host:
            raise NotifierError("SMTP_HOST is not configured")
        if not self.from_email:
            raise NotifierError("SMTP_FROM_EMAIL (or SMTP_USER) must be set")

        message = self.build_message(email, code, expires_in_minutes)
        try:
            await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError) as e:
            raise NotifierError(f"SMTP delivery to {self.host}:{self.port} failed") from e

        logger.info(f"OTP email handed to SMTP server {self.host}:{self.port}")

    def _deliver(self, message: EmailMessage) -> None:
        context = ssl.create_default_context()
        if self.port == 465:
            with smtplib.SMTP_SSL(
                self.host, self.port, context=context, timeout=self.timeout
            ) as client:
                if self.user:
                    client.login(self.user, self.password)
                client.send_message(message)
            return

        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as client:
            client.starttls(context=context)
            if self.user:
                client.login(self.user, self.password)
            client.send_message(message)
