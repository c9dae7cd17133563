"""
Comment and Like models for django-blog-platform.
"""
from django.conf import settings
from django.db import models

from ..threads import build_tree
from .accounts import Profile


class CommentQuerySet(models.QuerySet):
    def for_thread(self, post):
        """Comments of a post, newest first, in the order trees are built from."""
        return (
            self.filter(post=post)
            .select_related("author", "author__profile")
            .order_by("-created_at", "-id")
        )


class Comment(models.Model):
    """
    Comment on a post.

    Threaded replies are expressed through ``parent``, which must be a
    comment on the same post.
    """

    post = models.ForeignKey(
        "blog_platform.Post",
        on_delete=models.CASCADE,
        related_name="comments",
    )
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="blog_comments",
        db_column="user_id",
    )
    parent = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        on_delete=models.CASCADE,
        related_name="children",
    )
    content = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    objects = CommentQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["post", "-created_at"]),
        ]

    def __str__(self):
        return f"Comment by {self.author} on {self.post}"

    @property
    def preview(self):
        """Return truncated content for admin display."""
        if len(self.content) > 100:
            return self.content[:100] + "..."
        return self.content

    @property
    def is_reply(self):
        """Check if this is a reply to another comment."""
        return self.parent_id is not None

    @classmethod
    def thread_for(cls, post):
        """Return the post's comments as nested records, newest first."""
        return build_tree([comment.to_record() for comment in cls.objects.for_thread(post)])

    def to_record(self):
        """Flat representation with author summary and parent reference."""
        author = self.author
        return {
            "id": self.pk,
            "content": self.content,
            "created_at": self.created_at.isoformat(),
            "parent_id": self.parent_id,
            "user_id": author.pk,
            "username": author.get_username(),
            "avatar": Profile.for_user(author).avatar or None,
        }


class PostLike(models.Model):
    """A user's like on a post. Each user likes a post at most once."""

    post = models.ForeignKey(
        "blog_platform.Post",
        on_delete=models.CASCADE,
        related_name="likes",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="blog_likes",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ["post", "user"]
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.user} likes {self.post}"

    @classmethod
    def toggle(cls, post, user):
        """
        Like the post, or remove the like if the user already likes it.

        Returns True when the post is liked after the call.
        """
        deleted, _ = cls.objects.filter(post=post, user=user).delete()
        if deleted:
            return False
        cls.objects.create(post=post, user=user)
        return True
