"""
Models for django-blog-platform.

All models are importable from blog_platform.models:

    from blog_platform.models import Post, Category, Tag, Comment, Profile
"""
from .accounts import Profile
from .posts import Category, Tag, Post, PostFilter
from .comments import Comment, PostLike

__all__ = [
    # Accounts
    "Profile",
    # Posts
    "Category",
    "Tag",
    "Post",
    "PostFilter",
    # Comments
    "Comment",
    "PostLike",
]
