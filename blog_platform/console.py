"""
Admin and moderator console endpoints.

Admins manage users, categories and can delete any post. Moderators (and
admins) review posts and comments.
"""
import logging

from django.contrib.auth import get_user_model
from django.db.models import Count

from .api import (
    AdminRequiredMixin,
    ApiView,
    ModeratorRequiredMixin,
    get_or_404,
    paginate,
)
from .conf import blog_settings
from .exceptions import ApiError
from .forms import CategoryForm
from .models import Category, Comment, Post, Profile
from .slugs import normalize, truncate
from .uploads import discard_stored_url

logger = logging.getLogger(__name__)

User = get_user_model()


def user_row(user):
    return Profile.for_user(user).to_dict()


def post_row(post):
    return {
        "id": post.pk,
        "title": post.title,
        "slug": post.slug,
        "status": post.status,
        "views": post.views,
        "created_at": post.created_at.isoformat(),
        "updated_at": post.updated_at.isoformat(),
        "user_id": post.author_id,
        "author": post.author.get_username(),
        "category_name": post.category.name if post.category else None,
    }


def comment_row(comment):
    return {
        "id": comment.pk,
        "content": comment.content,
        "created_at": comment.created_at.isoformat(),
        "author": comment.author.get_username(),
        "post_title": comment.post.title,
        "post_slug": comment.post.slug,
    }


class DashboardView(AdminRequiredMixin, ApiView):
    """Site totals plus the latest posts and comments."""

    def get(self, request):
        by_status = (
            Post.objects.order_by()
            .values("status")
            .annotate(count=Count("id"))
        )
        recent_posts = Post.objects.select_related("author")[:5]
        recent_comments = Comment.objects.select_related("author", "post")[:5]

        return self.json({
            "stats": {
                "totalUsers": User.objects.count(),
                "totalPosts": Post.objects.count(),
                "totalComments": Comment.objects.count(),
                "totalCategories": Category.objects.count(),
                "postsByStatus": {row["status"]: row["count"] for row in by_status},
            },
            "recentPosts": [
                {
                    "id": post.pk,
                    "title": post.title,
                    "status": post.status,
                    "created_at": post.created_at.isoformat(),
                    "author": post.author.get_username(),
                }
                for post in recent_posts
            ],
            "recentComments": [
                {
                    "id": comment.pk,
                    "content": comment.content,
                    "created_at": comment.created_at.isoformat(),
                    "author": comment.author.get_username(),
                    "post_title": comment.post.title,
                }
                for comment in recent_comments
            ],
        })


# Users


class UserListView(AdminRequiredMixin, ApiView):
    def get(self, request):
        queryset = User.objects.select_related("profile").order_by("-date_joined", "-pk")
        return self.json(paginate(
            request,
            queryset,
            "users",
            "totalUsers",
            blog_settings.USERS_PER_PAGE,
            user_row,
        ))


class UserRoleView(AdminRequiredMixin, ApiView):
    def put(self, request, pk):
        role = self.payload().get("role")
        if role not in blog_settings.role_names:
            raise ApiError("Invalid role")
        if pk == request.api_user.pk:
            raise ApiError("Cannot change your own role")

        user = get_or_404(User.objects.all(), "User not found", pk=pk)
        profile = Profile.for_user(user)
        profile.role = role
        profile.save(update_fields=["role"])

        logger.info("Admin %s set role of user %s to %s", request.api_user.pk, pk, role)
        return self.json({"message": "User role updated successfully"})


class UserDetailView(AdminRequiredMixin, ApiView):
    def delete(self, request, pk):
        if pk == request.api_user.pk:
            raise ApiError("Cannot delete your own account")

        user = get_or_404(User.objects.all(), "User not found", pk=pk)
        user.delete()

        logger.info("Admin %s deleted user %s", request.api_user.pk, pk)
        return self.json({"message": "User deleted successfully"})


# Posts


class ConsolePostListView(ModeratorRequiredMixin, ApiView):
    """All posts regardless of status, optionally filtered by ``status``."""

    def get(self, request):
        queryset = (
            Post.objects.with_status(request.GET.get("status"))
            .select_related("author", "category")
        )
        return self.json(paginate(
            request,
            queryset,
            "posts",
            "totalPosts",
            blog_settings.POSTS_PER_PAGE,
            post_row,
        ))


class PostStatusView(ModeratorRequiredMixin, ApiView):
    def put(self, request, pk):
        status = self.payload().get("status")
        if status not in blog_settings.status_names:
            raise ApiError("Invalid status")

        post = get_or_404(Post.objects.all(), "Post not found", pk=pk)
        post.status = status
        post.save(update_fields=["status", "updated_at"])
        return self.json({"message": "Post status updated successfully"})


class ConsolePostDetailView(AdminRequiredMixin, ApiView):
    def delete(self, request, pk):
        post = get_or_404(Post.objects.all(), "Post not found", pk=pk)
        featured_image = post.featured_image
        post.delete()
        if featured_image:
            discard_stored_url(featured_image)

        logger.info("Admin %s deleted post %s", request.api_user.pk, pk)
        return self.json({"message": "Post deleted successfully"})


# Categories


class ConsoleCategoryListView(AdminRequiredMixin, ApiView):
    def post(self, request):
        data = self.validate(CategoryForm)
        slug = truncate(normalize(data["name"]), 100)
        if not slug:
            raise ApiError("Category name must contain letters or digits")
        if Category.objects.filter(slug=slug).exists():
            raise ApiError("Category already exists")

        category = Category.objects.create(
            name=data["name"],
            slug=slug,
            description=data["description"],
        )
        body = category.to_dict()
        body["message"] = "Category created successfully"
        return self.json(body, status=201)


class ConsoleCategoryDetailView(AdminRequiredMixin, ApiView):
    def put(self, request, pk):
        category = get_or_404(Category.objects.all(), "Category not found", pk=pk)
        data = self.validate(CategoryForm)
        category.name = data["name"]
        category.description = data["description"]
        category.save(update_fields=["name", "description", "updated_at"])
        return self.json({"message": "Category updated successfully"})

    def delete(self, request, pk):
        category = get_or_404(Category.objects.all(), "Category not found", pk=pk)
        if category.posts.exists():
            raise ApiError("Cannot delete category with existing posts")
        category.delete()
        return self.json({"message": "Category deleted successfully"})


# Comments


class ConsoleCommentListView(ModeratorRequiredMixin, ApiView):
    def get(self, request):
        queryset = Comment.objects.select_related("author", "post")
        return self.json(paginate(
            request,
            queryset,
            "comments",
            "totalComments",
            blog_settings.COMMENTS_PER_PAGE,
            comment_row,
        ))


class ConsoleCommentDetailView(ModeratorRequiredMixin, ApiView):
    def delete(self, request, pk):
        comment = get_or_404(Comment.objects.all(), "Comment not found", pk=pk)
        comment.delete()
        logger.info("Moderator %s deleted comment %s", request.api_user.pk, pk)
        return self.json({"message": "Comment deleted successfully"})
