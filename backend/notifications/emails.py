from __future__ import annotations

from django.conf import settings
from django.core.mail import send_mail


def _format_from_email() -> str:
    default_from = settings.DEFAULT_FROM_EMAIL
    email_addr = default_from
    if '<' in default_from and default_from.endswith('>'):
        email_addr = default_from.split('<', 1)[1].rstrip('>')
    return f"Marketplace <{email_addr}>"


def send_notification_email(*, recipient_email: str, title: str, message: str, link_path: str = ""):
    body_lines = [message, ""]
    if link_path:
        body_lines.append(f"View details: {settings.FRONTEND_URL.rstrip('/')}/{link_path.lstrip('/')}")
        body_lines.append("")
    body_lines.append("— The Marketplace Team")
    send_mail(
        title,
        "\n".join(body_lines),
        _format_from_email(),
        [recipient_email],
        fail_silently=False,
    )
