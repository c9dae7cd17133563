"""
Django admin configuration for blog_platform.
"""
from django.contrib import admin

from .models import (
    Category,
    Comment,
    Post,
    PostLike,
    Profile,
    Tag,
)


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ["user", "role", "created_at"]
    list_filter = ["role"]
    search_fields = ["user__username", "user__email", "bio"]
    raw_id_fields = ["user"]
    list_editable = ["role"]


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ["name", "slug", "post_count", "created_at"]
    search_fields = ["name", "slug", "description"]
    readonly_fields = ["created_at", "updated_at"]


@admin.register(Tag)
class TagAdmin(admin.ModelAdmin):
    list_display = ["name", "slug", "post_count", "created_at"]
    search_fields = ["name", "slug"]
    readonly_fields = ["created_at"]


@admin.register(Post)
class PostAdmin(admin.ModelAdmin):
    list_display = [
        "title_preview",
        "author",
        "status",
        "category",
        "views",
        "created_at",
    ]
    list_filter = ["status", "category", "created_at"]
    search_fields = ["title", "content", "author__username"]
    raw_id_fields = ["author", "category"]
    filter_horizontal = ["tags"]
    date_hierarchy = "created_at"
    readonly_fields = ["views", "created_at", "updated_at"]

    fieldsets = (
        (None, {
            "fields": ("title", "slug", "content", "excerpt", "author", "status")
        }),
        ("Taxonomy", {
            "fields": ("category", "tags")
        }),
        ("SEO & Media", {
            "fields": ("meta_description", "focus_keyword", "featured_image"),
        }),
        ("Metadata", {
            "fields": ("views", "created_at", "updated_at"),
            "classes": ("collapse",),
        }),
    )

    actions = ["publish_posts", "unpublish_posts"]

    @admin.display(description="Title")
    def title_preview(self, obj):
        """Truncated title for list display."""
        return obj.title[:60] + "..." if len(obj.title) > 60 else obj.title

    @admin.action(description="Publish selected posts")
    def publish_posts(self, request, queryset):
        for post in queryset:
            post.publish()
        self.message_user(request, f"{queryset.count()} posts published.")

    @admin.action(description="Move selected posts to draft")
    def unpublish_posts(self, request, queryset):
        for post in queryset:
            post.unpublish()
        self.message_user(request, f"{queryset.count()} posts moved to draft.")


@admin.register(Comment)
class CommentAdmin(admin.ModelAdmin):
    list_display = ["preview", "author", "post", "is_reply", "created_at"]
    list_filter = ["created_at"]
    search_fields = ["content", "author__username", "post__title"]
    raw_id_fields = ["post", "author", "parent"]
    readonly_fields = ["created_at"]


@admin.register(PostLike)
class PostLikeAdmin(admin.ModelAdmin):
    list_display = ["user", "post", "created_at"]
    list_filter = ["created_at"]
    search_fields = ["user__username", "post__title"]
    raw_id_fields = ["user", "post"]
