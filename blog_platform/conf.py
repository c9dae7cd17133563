"""
Configuration settings for django-blog-platform.

Override these in your Django settings.py:

    BLOG_PLATFORM = {
        'POSTS_PER_PAGE': 10,
        'TOKEN_MAX_AGE': 60 * 60 * 24 * 30,
        'UPLOAD_DIR': 'uploads',
        ...
    }

To run on top of an existing relational schema (users/posts/categories...),
use:

    BLOG_PLATFORM = {
        'USE_LEGACY_TABLE_NAMES': True,
    }

Post and comment authors live in a ``user_id`` column in both modes. The
legacy schema keeps role, avatar and bio on ``users``; legacy mode instead
expects a ``profiles`` table (id, user_id, role, avatar, bio, created_at)
to be added next to it.
"""
from django.conf import settings

DEFAULTS = {
    # Legacy table support for existing databases
    "USE_LEGACY_TABLE_NAMES": False,

    # Roles
    "ROLES": [
        ("user", "User"),
        ("moderator", "Moderator"),
        ("admin", "Admin"),
    ],
    "DEFAULT_ROLE": "user",
    "MIN_PASSWORD_LENGTH": 6,

    # Tokens
    "TOKEN_SALT": "blog_platform.tokens",
    "TOKEN_MAX_AGE": 60 * 60 * 24 * 30,

    # Posts
    "POST_STATUSES": [
        ("draft", "Draft"),
        ("published", "Published"),
    ],
    "DEFAULT_POST_STATUS": "draft",
    "POSTS_PER_PAGE": 10,
    "COMMENTS_PER_PAGE": 20,
    "USERS_PER_PAGE": 10,

    # Uploads
    "UPLOAD_DIR": "uploads",
    "UPLOAD_TYPES": ["featured", "images", "pdfs"],
    "IMAGE_EXTENSIONS": [".jpeg", ".jpg", ".png", ".gif", ".webp"],
    "IMAGE_MAX_SIZE_MB": 5,
    "PDF_MAX_SIZE_MB": 10,
    "EDITOR_MAX_SIZE_MB": 10,

    # SEO
    "SLUG_MAX_LENGTH": 200,
}

# Model name -> table name in the legacy schema. "profiles" is not part of
# that schema and has to be created before switching it on.
LEGACY_TABLES = {
    "profile": "profiles",
    "category": "categories",
    "tag": "tags",
    "post": "posts",
    "comment": "comments",
    "postlike": "post_likes",
}


class BlogPlatformSettings:
    """
    Lazy settings object that reads from Django settings.

    Access via: from blog_platform.conf import blog_settings
    """

    def __getattr__(self, name):
        if name not in DEFAULTS:
            raise AttributeError(f"Invalid blog_platform setting: {name}")

        user_settings = getattr(settings, "BLOG_PLATFORM", {})
        return user_settings.get(name, DEFAULTS[name])

    @property
    def role_names(self):
        """Return the valid role identifiers."""
        return [role for role, _label in self.ROLES]

    @property
    def status_names(self):
        """Return the valid post status identifiers."""
        return [status for status, _label in self.POST_STATUSES]


blog_settings = BlogPlatformSettings()


def get_table_name(model_name):
    """
    Get the database table name for a model.

    If USE_LEGACY_TABLE_NAMES is True, returns the legacy table name
    (e.g., 'posts' instead of 'blog_platform_post').

    Args:
        model_name: lowercase model name (e.g., 'post', 'category')

    Returns:
        Table name string
    """
    if blog_settings.USE_LEGACY_TABLE_NAMES:
        return LEGACY_TABLES[model_name]
    return f"blog_platform_{model_name}"


def configure_legacy_tables():
    """
    Point blog_platform models at the legacy table names.

    Called from AppConfig.ready(). Modifies model _meta.db_table at runtime
    and marks the models unmanaged so migrations leave the tables alone.
    """
    if not blog_settings.USE_LEGACY_TABLE_NAMES:
        return

    from . import models

    model_map = {
        models.Profile: "profile",
        models.Category: "category",
        models.Tag: "tag",
        models.Post: "post",
        models.Comment: "comment",
        models.PostLike: "postlike",
    }

    for model_class, model_name in model_map.items():
        model_class._meta.db_table = get_table_name(model_name)
        model_class._meta.managed = False

    # Post.tags -> post_tags
    through_model = models.Post._meta.get_field("tags").remote_field.through
    through_model._meta.db_table = "post_tags"
    through_model._meta.managed = False
