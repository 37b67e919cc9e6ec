"""Users app package.

Defines the email-login user model with the traveller, admin, affiliate
and merchant roles, the JWT authentication flows and the role permission
classes used by the other apps. Use ``apps.users.models.CustomUser`` as
the AUTH_USER_MODEL throughout the project.
"""
