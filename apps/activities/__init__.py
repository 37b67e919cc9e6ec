"""Activities app package.

Merchants list local activities, administrators moderate them and
travellers book them on their own or as add-ons to a destination booking.
"""
