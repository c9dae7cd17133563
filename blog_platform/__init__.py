"""
django-blog-platform - A JSON blog publishing backend for Django.

Features:
- User accounts with roles (user, moderator, admin) and signed bearer tokens
- Posts with categories, tags, SEO fields and view counts
- Bangla-aware slugs with optional transliteration
- Threaded comments assembled into reply trees
- Likes
- Featured image, content image and PDF uploads
- Admin and moderator console
"""

__version__ = "0.1.0"
__author__ = "Nestor Wheelock"
