"""
Tests for the django-blog-platform JSON API.
"""
import re

import pytest
from django.contrib.auth import get_user_model
from django.urls import reverse

from blog_platform.models import Category, Comment, Post, PostLike

User = get_user_model()

JSON = "application/json"


def url(name, **kwargs):
    return reverse(f"blog_platform:{name}", kwargs=kwargs)


class TestAuthentication:
    """Tests for bearer token handling."""

    def test_missing_token(self, client, db):
        response = client.get(url("profile"))
        assert response.status_code == 401
        assert response.json() == {"message": "Not authorized, no token"}

    def test_bad_token(self, client, db):
        response = client.get(url("profile"), HTTP_AUTHORIZATION="Bearer not-a-token")
        assert response.status_code == 401
        assert response.json()["message"] == "Not authorized, token failed"

    def test_token_for_deleted_user(self, client, user, auth):
        headers = auth(user)
        user.delete()
        response = client.get(url("profile"), **headers)
        assert response.status_code == 401
        assert response.json()["message"] == "User not found"

    def test_invalid_json(self, client, user, auth):
        response = client.post(url("post_list"), data="{oops", content_type=JSON, **auth(user))
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid JSON body"


class TestRegisterAndLogin:
    """Tests for registration, login and account endpoints."""

    def test_register(self, client, db):
        response = client.post(
            url("register"),
            {"username": "newbie", "email": "Newbie@Example.com", "password": "secret1"},
            content_type=JSON,
        )
        assert response.status_code == 201
        body = response.json()
        assert body["username"] == "newbie"
        assert body["email"] == "newbie@example.com"
        assert body["role"] == "user"
        assert body["token"]

        user = User.objects.get(username="newbie")
        assert user.check_password("secret1")
        assert user.profile.role == "user"

    def test_register_duplicate(self, client, user):
        response = client.post(
            url("register"),
            {"username": "someone", "email": "TESTUSER@example.com", "password": "secret1"},
            content_type=JSON,
        )
        assert response.status_code == 400
        assert response.json() == {"message": "User already exists"}

    def test_register_validation(self, client, db):
        response = client.post(
            url("register"),
            {"username": "ab", "email": "nope", "password": "123"},
            content_type=JSON,
        )
        assert response.status_code == 400
        fields = {error["field"] for error in response.json()["errors"]}
        assert fields == {"username", "email", "password"}

    def test_login(self, client, user):
        response = client.post(
            url("login"),
            {"email": "TestUser@example.com", "password": "testpass123"},
            content_type=JSON,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["id"] == user.pk
        token = body["token"]

        profile = client.get(url("profile"), HTTP_AUTHORIZATION=f"Bearer {token}")
        assert profile.json()["username"] == "testuser"

    def test_login_wrong_password(self, client, user):
        response = client.post(
            url("login"),
            {"email": "testuser@example.com", "password": "wrong-password"},
            content_type=JSON,
        )
        assert response.status_code == 401
        assert response.json() == {"message": "Invalid credentials"}

    def test_update_profile(self, client, user, auth):
        response = client.put(
            url("profile"),
            {"username": "renamed", "bio": "Hello"},
            content_type=JSON,
            **auth(user),
        )
        assert response.status_code == 200
        assert response.json()["username"] == "renamed"
        assert response.json()["bio"] == "Hello"
        user.refresh_from_db()
        assert user.username == "renamed"

    def test_update_profile_username_taken(self, client, user, other_user, auth):
        response = client.put(url("profile"), {"username": "other"}, content_type=JSON, **auth(user))
        assert response.status_code == 400
        assert response.json() == {"message": "Username already taken"}

    def test_change_password(self, client, user, auth):
        response = client.put(
            url("change_password"),
            {"current_password": "testpass123", "new_password": "newpass456"},
            content_type=JSON,
            **auth(user),
        )
        assert response.status_code == 200
        user.refresh_from_db()
        assert user.check_password("newpass456")

    def test_change_password_wrong_current(self, client, user, auth):
        response = client.put(
            url("change_password"),
            {"current_password": "nope-nope", "new_password": "newpass456"},
            content_type=JSON,
            **auth(user),
        )
        assert response.status_code == 401
        assert response.json() == {"message": "Current password is incorrect"}

    def test_change_password_missing_field(self, client, user, auth):
        response = client.put(
            url("change_password"),
            {"current_password": "testpass123"},
            content_type=JSON,
            **auth(user),
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["message"] == (
            "Please provide both current and new password"
        )

    def test_stats(self, client, user, other_user, post, auth):
        Comment.objects.create(post=post, author=user, content="Mine")
        PostLike.toggle(post, other_user)
        Post.objects.filter(pk=post.pk).update(views=7)

        response = client.get(url("user_stats"), **auth(user))
        assert response.json() == {
            "totalPosts": 1,
            "totalComments": 1,
            "totalLikesReceived": 1,
            "totalViews": 7,
        }


class TestPostList:
    """Tests for listing and searching posts."""

    @pytest.fixture
    def many_posts(self, user):
        for number in range(7):
            Post.objects.create(
                title=f"Published {number}",
                content="Body",
                author=user,
                status=Post.PUBLISHED,
            )
        Post.objects.create(title="Hidden draft", content="Body", author=user)

    def test_first_page(self, client, many_posts):
        body = client.get(url("post_list")).json()
        assert len(body["posts"]) == 5
        assert body["currentPage"] == 1
        assert body["totalPages"] == 2
        assert body["totalPosts"] == 7
        assert body["posts"][0]["title"] == "Published 6"

    def test_second_page(self, client, many_posts):
        body = client.get(url("post_list"), {"page": 2}).json()
        assert [post["title"] for post in body["posts"]] == ["Published 1", "Published 0"]

    def test_page_past_end_is_empty(self, client, many_posts):
        body = client.get(url("post_list"), {"page": 9}).json()
        assert body["posts"] == []
        assert body["currentPage"] == 9
        assert body["totalPosts"] == 7

    def test_limit(self, client, many_posts):
        body = client.get(url("post_list"), {"limit": 3}).json()
        assert len(body["posts"]) == 3
        assert body["totalPages"] == 3

    def test_status_ignored_for_anonymous(self, client, many_posts):
        body = client.get(url("post_list"), {"status": "draft"}).json()
        assert all(post["status"] == "published" for post in body["posts"])

    def test_status_for_moderator(self, client, many_posts, moderator, auth):
        body = client.get(url("post_list"), {"status": "draft"}, **auth(moderator)).json()
        assert [post["title"] for post in body["posts"]] == ["Hidden draft"]

    def test_search(self, client, post):
        body = client.get(url("post_search"), {"q": "test post"}).json()
        assert body["searchTerm"] == "test post"
        assert [found["id"] for found in body["posts"]] == [post.pk]

    def test_search_by_tag(self, client, post, user):
        post.set_tags(["Django"])
        Post.objects.create(title="Untagged", content="x", author=user, status=Post.PUBLISHED)
        body = client.get(url("post_search"), {"tag": "django"}).json()
        assert [found["id"] for found in body["posts"]] == [post.pk]
        assert body["searchTerm"] is None


class TestPostCreate:
    """Tests for creating posts."""

    def test_requires_token(self, client, db):
        response = client.post(url("post_list"), {"title": "T", "content": "C"}, content_type=JSON)
        assert response.status_code == 401

    def test_create(self, client, user, category, auth):
        response = client.post(
            url("post_list"),
            {
                "title": "My First Post",
                "content": "Hello",
                "category_id": category.pk,
                "status": "published",
                "tags": ["Django", "Python"],
            },
            content_type=JSON,
            **auth(user),
        )
        assert response.status_code == 201
        body = response.json()
        assert body["slug"] == "my-first-post"
        assert body["message"] == "Post created successfully"

        post = Post.objects.get(pk=body["id"])
        assert post.author == user
        assert post.category == category
        assert post.is_published
        assert sorted(post.tags.values_list("slug", flat=True)) == ["django", "python"]

    def test_defaults_to_draft(self, client, user, auth):
        response = client.post(
            url("post_list"),
            {"title": "Draft", "content": "Hello"},
            content_type=JSON,
            **auth(user),
        )
        assert Post.objects.get(pk=response.json()["id"]).status == Post.DRAFT

    def test_transliterated_slug(self, client, user, auth):
        response = client.post(
            url("post_list"),
            {"title": "আমার সোনার বাংলা", "content": "x", "transliterate_slug": True},
            content_type=JSON,
            **auth(user),
        )
        assert response.json()["slug"] == "amar-sonar-bangla"

    def test_native_slug(self, client, user, auth):
        response = client.post(
            url("post_list"),
            {"title": "আমার সোনার বাংলা", "content": "x"},
            content_type=JSON,
            **auth(user),
        )
        assert response.json()["slug"] == "আমার-সোনার-বাংলা"

    def test_custom_slug(self, client, user, auth):
        response = client.post(
            url("post_list"),
            {"title": "Whatever", "content": "x", "custom_slug": "Custom Slug!"},
            content_type=JSON,
            **auth(user),
        )
        assert response.json()["slug"] == "custom-slug"

    def test_duplicate_slug_suffixed(self, client, user, post, auth):
        response = client.post(
            url("post_list"),
            {"title": "Test Post", "content": "again"},
            content_type=JSON,
            **auth(user),
        )
        assert re.fullmatch(r"test-post-\d+", response.json()["slug"])

    def test_missing_fields(self, client, user, auth):
        response = client.post(url("post_list"), {}, content_type=JSON, **auth(user))
        assert response.status_code == 400
        messages = {error["field"]: error["message"] for error in response.json()["errors"]}
        assert messages == {"title": "Title is required", "content": "Content is required"}

    def test_title_without_slug_characters(self, client, user, auth):
        for _ in range(2):
            response = client.post(
                url("post_list"),
                {"title": "!!!", "content": "x"},
                content_type=JSON,
                **auth(user),
            )
            assert response.status_code == 400
            assert response.json()["errors"] == [
                {"field": "title", "message": "Title must contain letters or digits"}
            ]
        assert not Post.objects.exists()

    def test_custom_slug_without_slug_characters(self, client, user, auth):
        response = client.post(
            url("post_list"),
            {"title": "Fine title", "content": "x", "custom_slug": "*** ---"},
            content_type=JSON,
            **auth(user),
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "custom_slug"

    def test_tag_name_too_long(self, client, user, auth):
        response = client.post(
            url("post_list"),
            {"title": "Tagged", "content": "x", "tags": ["ok", "x" * 101]},
            content_type=JSON,
            **auth(user),
        )
        assert response.status_code == 400
        assert response.json()["errors"] == [
            {"field": "tags", "message": "Tag names must be at most 100 characters"}
        ]
        assert not Post.objects.exists()

    def test_tag_name_at_limit(self, client, user, auth):
        response = client.post(
            url("post_list"),
            {"title": "Tagged", "content": "x", "tags": ["x" * 100]},
            content_type=JSON,
            **auth(user),
        )
        assert response.status_code == 201

    def test_unknown_category(self, client, user, auth):
        response = client.post(
            url("post_list"),
            {"title": "T", "content": "C", "category_id": 999},
            content_type=JSON,
            **auth(user),
        )
        assert response.status_code == 400
        assert response.json() == {"message": "Category not found"}


class TestPostDetail:
    """Tests for reading, updating and deleting a single post."""

    def test_get_by_slug(self, client, post):
        response = client.get(url("post_detail", key="test-post"))
        assert response.status_code == 200
        body = response.json()
        assert body["id"] == post.pk
        assert body["content"] == "This is a test post body."
        assert body["likes"] == 0

        post.refresh_from_db()
        assert post.views == 1

    def test_get_bangla_slug(self, client, user):
        post = Post.objects.create(
            title="বাংলা ব্লগ", content="x", author=user, status=Post.PUBLISHED,
        )
        response = client.get(url("post_detail", key=post.slug))
        assert response.status_code == 200
        assert response.json()["id"] == post.pk

    def test_missing(self, client, db):
        response = client.get(url("post_detail", key="nope"))
        assert response.status_code == 404
        assert response.json() == {"message": "Post not found"}

    def test_draft_hidden_from_others(self, client, user, other_user, auth):
        Post.objects.create(title="Secret", content="x", author=user)
        assert client.get(url("post_detail", key="secret")).status_code == 404
        assert client.get(url("post_detail", key="secret"), **auth(other_user)).status_code == 404

    def test_draft_visible_to_author_and_moderator(self, client, user, moderator, auth):
        Post.objects.create(title="Secret", content="x", author=user)
        assert client.get(url("post_detail", key="secret"), **auth(user)).status_code == 200
        assert client.get(url("post_detail", key="secret"), **auth(moderator)).status_code == 200

    def test_update(self, client, user, post, auth):
        response = client.put(
            url("post_detail", key=str(post.pk)),
            {"title": "Updated Title", "content": "New body", "tags": "one, two"},
            content_type=JSON,
            **auth(user),
        )
        assert response.status_code == 200
        post.refresh_from_db()
        assert post.title == "Updated Title"
        assert post.content == "New body"
        # Slug stays put unless asked for
        assert post.slug == "test-post"
        assert sorted(post.tags.values_list("slug", flat=True)) == ["one", "two"]

    def test_update_with_custom_slug(self, client, user, post, auth):
        response = client.put(
            url("post_detail", key=str(post.pk)),
            {"title": "Test Post", "content": "x", "custom_slug": "renamed"},
            content_type=JSON,
            **auth(user),
        )
        assert response.json()["slug"] == "renamed"

    def test_update_keeps_own_slug(self, client, user, post, auth):
        response = client.put(
            url("post_detail", key=str(post.pk)),
            {"title": "Test Post", "content": "x", "transliterate_slug": False},
            content_type=JSON,
            **auth(user),
        )
        assert response.json()["slug"] == "test-post"

    def test_update_not_owner(self, client, other_user, post, auth):
        response = client.put(
            url("post_detail", key=str(post.pk)),
            {"title": "Hijack", "content": "x"},
            content_type=JSON,
            **auth(other_user),
        )
        assert response.status_code == 403
        assert response.json() == {"message": "Not authorized to update this post"}

    def test_update_requires_numeric_id(self, client, user, post, auth):
        response = client.put(
            url("post_detail", key="test-post"),
            {"title": "T", "content": "x"},
            content_type=JSON,
            **auth(user),
        )
        assert response.status_code == 404

    def test_delete(self, client, user, post, auth):
        response = client.delete(url("post_detail", key=str(post.pk)), **auth(user))
        assert response.status_code == 200
        assert not Post.objects.filter(pk=post.pk).exists()

    def test_delete_not_owner(self, client, other_user, post, auth):
        response = client.delete(url("post_detail", key=str(post.pk)), **auth(other_user))
        assert response.status_code == 403
        assert response.json() == {"message": "Not authorized to delete this post"}

    def test_like_toggle(self, client, user, post, auth):
        first = client.post(url("post_like", pk=post.pk), **auth(user)).json()
        assert first == {"liked": True, "likes": 1, "message": "Post liked"}
        second = client.post(url("post_like", pk=post.pk), **auth(user)).json()
        assert second == {"liked": False, "likes": 0, "message": "Post unliked"}


class TestCategories:
    """Tests for public category endpoints."""

    def test_list(self, client, category):
        Category.objects.create(name="Another")
        body = client.get(url("category_list")).json()
        assert [item["name"] for item in body] == ["Another", "Test Category"]

    def test_category_posts(self, client, category, post, user):
        Post.objects.create(title="Draft", content="x", author=user, category=category)
        body = client.get(url("category_posts", slug="test-category")).json()
        assert body["category"]["name"] == "Test Category"
        assert [item["id"] for item in body["posts"]] == [post.pk]
        assert body["totalPosts"] == 1

    def test_unknown_category(self, client, db):
        response = client.get(url("category_posts", slug="missing"))
        assert response.status_code == 404
        assert response.json() == {"message": "Category not found"}


class TestComments:
    """Tests for comment threads."""

    def test_add_comment_and_reply(self, client, user, other_user, post, auth):
        response = client.post(
            url("post_comments", post_id=post.pk),
            {"content": "First!"},
            content_type=JSON,
            **auth(user),
        )
        assert response.status_code == 201
        root_id = response.json()["id"]

        response = client.post(
            url("post_comments", post_id=post.pk),
            {"content": "Reply", "parent_id": root_id},
            content_type=JSON,
            **auth(other_user),
        )
        assert response.status_code == 201

        tree = client.get(url("post_comments", post_id=post.pk)).json()
        assert len(tree) == 1
        assert tree[0]["id"] == root_id
        assert tree[0]["username"] == "testuser"
        assert [reply["content"] for reply in tree[0]["replies"]] == ["Reply"]
        assert tree[0]["replies"][0]["replies"] == []

    def test_empty_thread(self, client, post):
        assert client.get(url("post_comments", post_id=post.pk)).json() == []

    def test_comment_requires_content(self, client, user, post, auth):
        response = client.post(
            url("post_comments", post_id=post.pk), {}, content_type=JSON, **auth(user),
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["message"] == "Comment content is required"

    def test_parent_must_belong_to_post(self, client, user, post, auth):
        other_post = Post.objects.create(title="Other", content="x", author=user)
        foreign = Comment.objects.create(post=other_post, author=user, content="Elsewhere")
        response = client.post(
            url("post_comments", post_id=post.pk),
            {"content": "Reply", "parent_id": foreign.pk},
            content_type=JSON,
            **auth(user),
        )
        assert response.status_code == 404
        assert response.json() == {"message": "Parent comment not found"}

    def test_unknown_post(self, client, db):
        response = client.get(url("post_comments", post_id=999))
        assert response.status_code == 404

    def test_delete_own_comment(self, client, user, post, auth):
        comment = Comment.objects.create(post=post, author=user, content="Oops")
        response = client.delete(url("comment_detail", pk=comment.pk), **auth(user))
        assert response.status_code == 200
        assert not Comment.objects.filter(pk=comment.pk).exists()

    def test_delete_other_users_comment(self, client, user, other_user, post, auth):
        comment = Comment.objects.create(post=post, author=user, content="Mine")
        response = client.delete(url("comment_detail", pk=comment.pk), **auth(other_user))
        assert response.status_code == 403
        assert response.json() == {"message": "Not authorized to delete this comment"}
