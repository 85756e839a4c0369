"""
Reply keyboards.
"""
