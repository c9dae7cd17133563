"""
JSON API views for django-blog-platform.
"""
import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Q, Sum

from .api import (
    ApiView,
    TokenRequiredMixin,
    get_or_404,
    paginate,
)
from .conf import blog_settings
from .exceptions import ApiError, Forbidden, NotAuthenticated, NotFound
from .forms import (
    CommentForm,
    LoginForm,
    PasswordChangeForm,
    PostForm,
    ProfileForm,
    RegisterForm,
)
from .models import Category, Comment, Post, PostFilter, PostLike, Profile
from .tokens import issue_token
from .uploads import RULES, delete_upload, discard_stored_url, list_uploads, save_upload

logger = logging.getLogger(__name__)

User = get_user_model()


# Authentication


class RegisterView(ApiView):
    """Create an account with the default role and return a token."""

    def post(self, request):
        data = self.validate(RegisterForm)

        taken = User.objects.filter(
            Q(email__iexact=data["email"]) | Q(username=data["username"])
        ).exists()
        if taken:
            raise ApiError("User already exists")

        user = User.objects.create_user(
            username=data["username"],
            email=data["email"],
            password=data["password"],
        )
        profile = Profile.for_user(user)
        logger.info("Registered user %s", user.pk)

        return self.json({
            "id": user.pk,
            "username": user.get_username(),
            "email": user.email,
            "role": profile.role,
            "token": issue_token(user),
        }, status=201)


class LoginView(ApiView):
    """Exchange email and password for a token."""

    def post(self, request):
        data = self.validate(LoginForm)

        user = User.objects.filter(email__iexact=data["email"]).first()
        if user is None or not user.is_active or not user.check_password(data["password"]):
            raise NotAuthenticated("Invalid credentials")

        logger.info("User %s logged in", user.pk)
        return self.json({
            "id": user.pk,
            "username": user.get_username(),
            "email": user.email,
            "role": Profile.for_user(user).role,
            "token": issue_token(user),
        })


class ProfileView(TokenRequiredMixin, ApiView):
    """Read or update the current user's profile."""

    def get(self, request):
        return self.json(request.profile.to_dict())

    def put(self, request):
        data = self.validate(ProfileForm)
        payload = self.payload()
        user = request.api_user
        profile = request.profile

        username = data["username"]
        if username:
            if User.objects.filter(username=username).exclude(pk=user.pk).exists():
                raise ApiError("Username already taken")
            user.username = username
            user.save(update_fields=["username"])

        changed = [field for field in ("bio", "avatar") if field in payload]
        for field in changed:
            setattr(profile, field, data[field])
        if changed:
            profile.save(update_fields=changed)

        return self.json(profile.to_dict())


class ChangePasswordView(TokenRequiredMixin, ApiView):
    def put(self, request):
        data = self.validate(PasswordChangeForm)
        user = request.api_user

        if not user.check_password(data["current_password"]):
            raise NotAuthenticated("Current password is incorrect")

        user.set_password(data["new_password"])
        user.save(update_fields=["password"])
        return self.json({"message": "Password changed successfully"})


class UserStatsView(TokenRequiredMixin, ApiView):
    """Totals for the current user's posts, comments, likes and views."""

    def get(self, request):
        user = request.api_user
        posts = Post.objects.filter(author=user)
        return self.json({
            "totalPosts": posts.count(),
            "totalComments": Comment.objects.filter(author=user).count(),
            "totalLikesReceived": PostLike.objects.filter(post__author=user).count(),
            "totalViews": posts.aggregate(total=Sum("views"))["total"] or 0,
        })


# Posts


class PostPayloadMixin:
    """Applies validated PostForm data to a post."""

    def category_for(self, category_id):
        if category_id is None:
            return None
        category = Category.objects.filter(pk=category_id).first()
        if category is None:
            raise ApiError("Category not found")
        return category

    def apply(self, post, data):
        post.title = data["title"]
        post.content = data["content"]
        post.excerpt = data["excerpt"]
        post.featured_image = data["featured_image"]
        post.meta_description = data["meta_description"]
        post.focus_keyword = data["focus_keyword"]
        post.category = self.category_for(data["category_id"])
        if data["status"]:
            post.status = data["status"]


class PostListView(PostPayloadMixin, TokenRequiredMixin, ApiView):
    """
    GET: published posts, newest first. Moderators may pass ``status``.
    POST: create a post owned by the current user.
    """

    public_methods = ("get",)

    def get(self, request):
        status = Post.PUBLISHED
        requested = request.GET.get("status")
        if requested and requested != status:
            user = self.optional_user(request)
            if user is not None and Profile.for_user(user).is_moderator:
                status = requested

        queryset = Post.objects.with_status(status).for_listing()
        return self.json(paginate(
            request,
            queryset,
            "posts",
            "totalPosts",
            blog_settings.POSTS_PER_PAGE,
            Post.to_summary,
        ))

    def post(self, request):
        data = self.validate(PostForm)

        post = Post(author=request.api_user)
        self.apply(post, data)
        post.assign_slug(
            title=data["title"],
            custom_slug=data["custom_slug"],
            transliterate=data["transliterate_slug"],
        )
        with transaction.atomic():
            post.save()
            post.set_tags(data["tags"], data["transliterate_slug"])

        logger.info("User %s created post %s (%s)", request.api_user.pk, post.pk, post.slug)
        return self.json({
            "id": post.pk,
            "slug": post.slug,
            "message": "Post created successfully",
        }, status=201)


class PostSearchView(ApiView):
    """Search published posts by text, category slug and tag slug."""

    def get(self, request):
        post_filter = PostFilter(
            q=request.GET.get("q") or None,
            category=request.GET.get("category") or None,
            tag=request.GET.get("tag") or None,
        )
        queryset = Post.objects.matching(post_filter).for_listing()
        body = paginate(
            request,
            queryset,
            "posts",
            "totalPosts",
            blog_settings.POSTS_PER_PAGE,
            Post.to_summary,
        )
        body["searchTerm"] = post_filter.q
        return self.json(body)


class PostDetailView(PostPayloadMixin, TokenRequiredMixin, ApiView):
    """
    GET by slug (public), PUT and DELETE by id (owner only).

    Drafts are only shown to their author and to moderators.
    """

    public_methods = ("get",)

    def get(self, request, key):
        post = get_or_404(Post.objects.for_listing(), "Post not found", slug=key)

        if not post.is_published:
            user = self.optional_user(request)
            allowed = user is not None and (
                user.pk == post.author_id or Profile.for_user(user).is_moderator
            )
            if not allowed:
                raise NotFound("Post not found")

        post.increment_views()
        return self.json(post.to_dict())

    def owned_post(self, key, action):
        if not key.isdigit():
            raise NotFound("Post not found")
        post = get_or_404(Post.objects.all(), "Post not found", pk=int(key))
        if post.author_id != self.request.api_user.pk:
            raise Forbidden(f"Not authorized to {action} this post")
        return post

    def put(self, request, key):
        post = self.owned_post(key, "update")
        data = self.validate(PostForm)
        payload = self.payload()
        old_image = post.featured_image

        self.apply(post, data)
        if data["custom_slug"] or (data["title"] and "transliterate_slug" in payload):
            post.assign_slug(
                title=data["title"],
                custom_slug=data["custom_slug"],
                transliterate=data["transliterate_slug"],
            )
        with transaction.atomic():
            post.save()
            if "tags" in payload:
                post.set_tags(data["tags"], data["transliterate_slug"])

        if old_image and old_image != post.featured_image:
            discard_stored_url(old_image)

        return self.json({"message": "Post updated successfully", "slug": post.slug})

    def delete(self, request, key):
        post = self.owned_post(key, "delete")
        featured_image = post.featured_image
        post.delete()
        if featured_image:
            discard_stored_url(featured_image)
        return self.json({"message": "Post deleted successfully"})


class PostLikeView(TokenRequiredMixin, ApiView):
    """Toggle the current user's like on a post."""

    def post(self, request, pk):
        post = get_or_404(Post.objects.all(), "Post not found", pk=pk)
        liked = PostLike.toggle(post, request.api_user)
        return self.json({
            "liked": liked,
            "likes": post.like_count,
            "message": "Post liked" if liked else "Post unliked",
        })


# Categories


class CategoryListView(ApiView):
    def get(self, request):
        return self.json([category.to_dict() for category in Category.objects.all()])


class CategoryPostsView(ApiView):
    """Published posts of one category."""

    def get(self, request, slug):
        category = get_or_404(Category.objects.all(), "Category not found", slug=slug)
        queryset = category.posts.published().for_listing()
        body = {"category": category.to_dict()}
        body.update(paginate(
            request,
            queryset,
            "posts",
            "totalPosts",
            blog_settings.POSTS_PER_PAGE,
            Post.to_summary,
        ))
        return self.json(body)


# Comments


class PostCommentsView(TokenRequiredMixin, ApiView):
    """
    GET: the post's comments as a tree of replies, newest first.
    POST: add a comment or a reply.
    """

    public_methods = ("get",)

    def get(self, request, post_id):
        post = get_or_404(Post.objects.all(), "Post not found", pk=post_id)
        return self.json(Comment.thread_for(post))

    def post(self, request, post_id):
        post = get_or_404(Post.objects.all(), "Post not found", pk=post_id)
        data = self.validate(CommentForm)

        parent = None
        if data["parent_id"] is not None:
            parent = get_or_404(
                Comment.objects.all(),
                "Parent comment not found",
                pk=data["parent_id"],
                post=post,
            )

        comment = Comment.objects.create(
            post=post,
            author=request.api_user,
            parent=parent,
            content=data["content"],
        )
        return self.json({
            "id": comment.pk,
            "message": "Comment created successfully",
        }, status=201)


class CommentDetailView(TokenRequiredMixin, ApiView):
    def delete(self, request, pk):
        comment = get_or_404(Comment.objects.all(), "Comment not found", pk=pk)
        if comment.author_id != request.api_user.pk:
            raise Forbidden("Not authorized to delete this comment")
        comment.delete()
        return self.json({"message": "Comment deleted successfully"})


# Uploads


class UploadView(TokenRequiredMixin, ApiView):
    """Store one uploaded file; ``rule_name`` selects what is accepted."""

    rule_name = None

    MESSAGES = {
        "featured": "Featured image uploaded successfully",
        "image": "Image uploaded successfully",
        "pdf": "PDF uploaded successfully",
        "editor": "File uploaded successfully",
    }

    def post(self, request):
        rule = RULES[self.rule_name]
        info = save_upload(request.FILES.get(rule.field), rule)
        return self.json({"message": self.MESSAGES[self.rule_name], "file": info})


class UploadListView(TokenRequiredMixin, ApiView):
    def get(self, request, upload_type):
        files = list_uploads(upload_type)
        return self.json({"type": upload_type, "count": len(files), "files": files})


class UploadDeleteView(TokenRequiredMixin, ApiView):
    def delete(self, request, upload_type, filename):
        delete_upload(upload_type, filename)
        return self.json({"message": "File deleted successfully"})
