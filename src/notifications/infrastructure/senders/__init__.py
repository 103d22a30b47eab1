from src.notifications.infrastructure.senders.email_sender import EmailSender, get_email_sender
from src.notifications.infrastructure.senders.whatsapp_sender import WhatsAppSender, get_whatsapp_sender

__all__ = ["EmailSender", "get_email_sender", "WhatsAppSender", "get_whatsapp_sender"]
