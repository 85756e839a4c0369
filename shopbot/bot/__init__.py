"""
Telegram transport.
"""
