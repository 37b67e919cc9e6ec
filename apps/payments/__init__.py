"""Payments app package.

Wraps the card payment provider behind a small gateway interface, records
every provider callback and moves bookings through their payment states.
"""
