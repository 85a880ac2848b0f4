import logging

from django.contrib.auth import get_user_model
from django.contrib.auth.backends import BaseBackend

logger = logging.getLogger(__name__)

User = get_user_model()


class EmailBackend(BaseBackend):
    """
    Authenticate SACCO members by email address.

    Inactive and unapproved accounts still authenticate here so the login
    view can tell the member why they are being turned away.
    """

    def authenticate(self, request, email=None, password=None, **kwargs):
        if not email or not password:
            return None

        member = User.objects.filter(email__iexact=str(email).strip()).first()
        if member is None:
            logger.info(f"Login attempt for unknown email {email}")
            return None

        if not member.check_password(password):
            logger.warning(f"Wrong password for member {member.pk}")
            return None

        return member

    def get_user(self, user_id):
        return User.objects.filter(pk=user_id).first()
