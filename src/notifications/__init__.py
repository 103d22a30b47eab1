"""Notifications bounded context: in-app inbox plus best-effort email and WhatsApp delivery."""
