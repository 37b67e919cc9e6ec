"""Messaging app package.

Booking-scoped messages between a traveller and the Triply team.
"""
