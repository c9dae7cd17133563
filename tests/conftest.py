"""
Shared fixtures for django-blog-platform tests.
"""
import pytest
from django.contrib.auth import get_user_model

from blog_platform.models import Category, Post, Profile
from blog_platform.tokens import issue_token

User = get_user_model()


def make_user(username, role=Profile.USER, password="testpass123"):
    user = User.objects.create_user(
        username=username,
        email=f"{username}@example.com",
        password=password,
    )
    if role != Profile.USER:
        Profile.objects.filter(user=user).update(role=role)
        user.refresh_from_db()
    return user


@pytest.fixture
def user(db):
    """Create a test user."""
    return make_user("testuser")


@pytest.fixture
def other_user(db):
    return make_user("other")


@pytest.fixture
def moderator(db):
    return make_user("moderator", role=Profile.MODERATOR)


@pytest.fixture
def admin_user(db):
    return make_user("admin", role=Profile.ADMIN)


@pytest.fixture
def auth():
    """Build request kwargs carrying a bearer token for a user."""
    def _auth(user):
        return {"HTTP_AUTHORIZATION": f"Bearer {issue_token(user)}"}
    return _auth


@pytest.fixture
def category(db):
    """Create a test category."""
    return Category.objects.create(name="Test Category")


@pytest.fixture
def post(db, user, category):
    """Create a published test post."""
    return Post.objects.create(
        title="Test Post",
        content="This is a test post body.",
        author=user,
        category=category,
        status=Post.PUBLISHED,
    )
