"""
User profile model for django-blog-platform.
"""
from django.conf import settings
from django.db import models

from ..conf import blog_settings


class Profile(models.Model):
    """
    Blog-specific data attached to a user account.

    Holds the user's role, which gates the moderator and admin console.
    """

    USER = "user"
    MODERATOR = "moderator"
    ADMIN = "admin"

    ROLE_CHOICES = blog_settings.ROLES

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
    )
    role = models.CharField(
        max_length=20,
        choices=ROLE_CHOICES,
        default=blog_settings.DEFAULT_ROLE,
        db_index=True,
    )
    avatar = models.CharField(max_length=500, blank=True)
    bio = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.user} ({self.role})"

    @classmethod
    def for_user(cls, user):
        """Return the user's profile, creating it for accounts that predate the app."""
        try:
            return user.profile
        except cls.DoesNotExist:
            profile, _created = cls.objects.get_or_create(user=user)
            return profile

    @property
    def is_admin(self):
        return self.role == self.ADMIN

    @property
    def is_moderator(self):
        """Admins can do everything moderators can."""
        return self.role in (self.MODERATOR, self.ADMIN)

    def to_dict(self):
        user = self.user
        return {
            "id": user.pk,
            "username": user.get_username(),
            "email": user.email,
            "avatar": self.avatar or None,
            "bio": self.bio or None,
            "role": self.role,
            "created_at": user.date_joined.isoformat(),
        }
