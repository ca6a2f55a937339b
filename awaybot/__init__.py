"""
awaybot - auto-responder for a personal WhatsApp account.
"""

__version__ = "0.3.0"
__logo__ = "📨"
