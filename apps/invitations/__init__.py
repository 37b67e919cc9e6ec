"""Invitations app package.

Administrators invite staff, affiliates and merchants by email; the
invitee accepts with the emailed token and gets an account with that role.
"""
