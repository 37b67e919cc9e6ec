"""Bookings app package.

Deposit bookings of destinations: creation with an optional affiliate code
and activity add-ons, date selection against the availability calendar,
administrator confirmation and the daily calendar-expiry reminders.
"""
