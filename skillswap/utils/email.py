import os
from aiosmtplib import send
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from jinja2 import Environment, FileSystemLoader
from ..core.config import get_settings
from .logger import get_logger

settings = get_settings()
logger = get_logger(__name__)

TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "template")
env = Environment(loader=FileSystemLoader(TEMPLATE_DIR))


async def _send_email(email_to: str, subject: str, html_content: str):
    msg = MIMEMultipart()
    msg["From"] = f"{settings.EMAILS_FROM_NAME} <{settings.EMAILS_FROM_EMAIL}>"
    msg["To"] = email_to
    msg["Subject"] = subject
    msg.attach(MIMEText(html_content, "html"))

    await send(
        msg,
        hostname=settings.SMTP_SERVER,
        port=settings.SMTP_PORT,
        username=settings.SMTP_USER,
        password=settings.SMTP_PASSWORD,
        use_tls=False,
        start_tls=True
    )
    logger.info("Sent '%s' email to %s", subject, email_to)


async def send_verification_email(email_to: str, user_name: str, verification_url: str):
    template = env.get_template("verify_email.html")
    html_content = template.render(user_name=user_name, verification_url=verification_url)
    await _send_email(email_to, "Verify your SkillSwap email", html_content)
