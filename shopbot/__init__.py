"""
Conversational shop bot.
"""
