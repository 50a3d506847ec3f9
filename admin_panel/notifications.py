from django.core.mail import EmailMultiAlternatives
from django.conf import settings
from .models import Notification
import logging

logger = logging.getLogger(__name__)


def sender_address():
    return f"{settings.EMAIL_SENDER_NAME} <{settings.DEFAULT_FROM_EMAIL}>"


def create_notification(title, message, priority='MEDIUM', user=None):
    """Helper function to create notifications"""
    try:
        notification = Notification.objects.create(
            title=title,
            message=message,
            priority=priority,
            created_for=user
        )
        return notification
    except Exception as e:
        logger.error(f"Failed to create notification: {str(e)}")
        return None


def send_html_email(subject, text_content, html_content, recipient_list, attachments=None):
    """Send both plain text and HTML versions; attachments are (name, bytes, mimetype) tuples"""
    recipient_list = [r for r in recipient_list if r]
    if not recipient_list:
        return False
    try:
        msg = EmailMultiAlternatives(subject, text_content, sender_address(), recipient_list)
        msg.attach_alternative(html_content, "text/html")
        for name, content, mimetype in attachments or []:
            msg.attach(name, content, mimetype)
        msg.send()
        return True
    except Exception as e:
        logger.error(f"Failed to send email '{subject}' to {recipient_list}: {str(e)}")
        return False


def wrap_html(title, body_html):
    """Shared layout for outgoing HTML mail"""
    return f"""
    <html>
      <body style="font-family: Arial, sans-serif; background-color: #f9fafb; padding: 30px;">
        <div style="max-width: 600px; margin: auto; background-color: #ffffff; border-radius: 10px; padding: 30px; box-shadow: 0 4px 8px rgba(0,0,0,0.05);">
          <h2 style="color: #2563eb; text-align: center;">{title}</h2>
          {body_html}
          <hr style="margin-top: 30px; border: none; border-top: 1px solid #e0e0e0;">
          <p style="text-align: center; font-size: 12px; color: #aaa;">
            {settings.EMAIL_SENDER_NAME}
          </p>
        </div>
      </body>
    </html>
    """
