"""
Post, Category, and Tag models for django-blog-platform.
"""
from dataclasses import dataclass
from typing import Optional

from django.conf import settings
from django.db import models
from django.urls import reverse

from ..conf import blog_settings
from ..slugs import normalize, resolve_unique, smart_slugify, truncate
from .accounts import Profile


def make_slug(text, transliterate=False):
    """Smart slug for text, cut to SLUG_MAX_LENGTH."""
    return truncate(smart_slugify(text, transliterate), blog_settings.SLUG_MAX_LENGTH)


class Category(models.Model):
    """
    Category for organizing posts.

    The slug is derived from the name without transliteration.
    """

    name = models.CharField(max_length=100)
    slug = models.SlugField(max_length=100, unique=True, allow_unicode=True)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "Categories"

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = truncate(normalize(self.name), 100)
        super().save(*args, **kwargs)

    def get_absolute_url(self):
        return reverse("blog_platform:category_posts", kwargs={"slug": self.slug})

    @property
    def post_count(self):
        """Return count of published posts in this category."""
        return self.posts.published().count()

    def to_dict(self):
        return {
            "id": self.pk,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class TagManager(models.Manager):
    def for_name(self, name, transliterate=False):
        """Return the tag whose slug matches name, creating it if needed."""
        tag, _created = self.get_or_create(
            slug=make_slug(name, transliterate),
            defaults={"name": name},
        )
        return tag


class Tag(models.Model):
    """
    Flat tag for posts.

    Tags are looked up by slug, so "Django" and "django" share one tag.
    """

    name = models.CharField(max_length=100)
    slug = models.SlugField(max_length=255, unique=True, allow_unicode=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = TagManager()

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = make_slug(self.name)
        super().save(*args, **kwargs)

    @property
    def post_count(self):
        """Return count of published posts with this tag."""
        return self.posts.published().count()

    def to_dict(self):
        return {"id": self.pk, "name": self.name, "slug": self.slug}


@dataclass
class PostFilter:
    """
    Search criteria for posts.

    Every field is optional; unset fields do not restrict the result.
    ``category`` and ``tag`` are slugs.
    """

    q: Optional[str] = None
    category: Optional[str] = None
    tag: Optional[str] = None
    status: Optional[str] = "published"

    def to_q(self):
        condition = models.Q()
        if self.status:
            condition &= models.Q(status=self.status)
        if self.q:
            condition &= (
                models.Q(title__icontains=self.q)
                | models.Q(content__icontains=self.q)
                | models.Q(meta_description__icontains=self.q)
                | models.Q(focus_keyword__icontains=self.q)
            )
        if self.category:
            condition &= models.Q(category__slug=self.category)
        if self.tag:
            condition &= models.Q(tags__slug=self.tag)
        return condition


class PostQuerySet(models.QuerySet):
    def published(self):
        return self.filter(status=Post.PUBLISHED)

    def with_status(self, status):
        if not status:
            return self
        return self.filter(status=status)

    def matching(self, post_filter):
        """Posts matching a PostFilter, without duplicates from tag joins."""
        return self.filter(post_filter.to_q()).distinct()

    def for_listing(self):
        return self.select_related("author", "author__profile", "category")


class Post(models.Model):
    """
    Blog post / article.

    Supports:
    - Draft and published status
    - Custom or title-derived slugs, optionally transliterated from Bangla
    - SEO fields (meta description, focus keyword)
    - Featured image and view counting
    """

    DRAFT = "draft"
    PUBLISHED = "published"

    STATUS_CHOICES = blog_settings.POST_STATUSES

    # Content
    title = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, blank=True, db_index=True, allow_unicode=True)
    content = models.TextField()
    excerpt = models.TextField(blank=True)
    featured_image = models.CharField(max_length=500, blank=True)

    # SEO
    meta_description = models.CharField(max_length=160, blank=True)
    focus_keyword = models.CharField(max_length=100, blank=True)

    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="blog_posts",
        db_column="user_id",
    )

    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=blog_settings.DEFAULT_POST_STATUS,
        db_index=True,
    )

    # Taxonomy
    category = models.ForeignKey(
        Category,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="posts",
    )
    tags = models.ManyToManyField(Tag, related_name="posts", blank=True)

    # Engagement stats
    views = models.PositiveIntegerField(default=0)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = PostQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["status", "-created_at"]),
            models.Index(fields=["author", "-created_at"]),
        ]

    def __str__(self):
        return self.title

    def save(self, *args, **kwargs):
        if not self.slug and self.title:
            self.assign_slug(title=self.title)
        super().save(*args, **kwargs)

    def get_absolute_url(self):
        return reverse("blog_platform:post_detail", kwargs={"key": self.slug})

    @classmethod
    def slug_exists(cls, slug, exclude_pk=None):
        """Check whether another post already uses slug."""
        qs = cls.objects.filter(slug=slug)
        if exclude_pk is not None:
            qs = qs.exclude(pk=exclude_pk)
        return qs.exists()

    def assign_slug(self, title=None, custom_slug=None, transliterate=False):
        """
        Set the slug from a custom slug or the title.

        A custom slug is normalized as given; a title goes through
        smart_slugify. On collision with another post a timestamp
        suffix is appended.
        """
        if custom_slug:
            candidate = truncate(normalize(custom_slug), blog_settings.SLUG_MAX_LENGTH)
        else:
            candidate = make_slug(title or self.title, transliterate)
        self.slug = resolve_unique(
            candidate,
            lambda slug: Post.slug_exists(slug, exclude_pk=self.pk),
        )
        return self.slug

    @property
    def is_published(self):
        return self.status == self.PUBLISHED

    @property
    def like_count(self):
        return self.likes.count()

    def publish(self):
        """Publish the post immediately."""
        self.status = self.PUBLISHED
        self.save(update_fields=["status", "updated_at"])

    def unpublish(self):
        """Move the post back to draft."""
        self.status = self.DRAFT
        self.save(update_fields=["status", "updated_at"])

    def increment_views(self):
        """Increment view count atomically."""
        Post.objects.filter(pk=self.pk).update(views=models.F("views") + 1)

    def set_tags(self, names, transliterate=False):
        """Replace the post's tags with tags for the given names."""
        tags = [Tag.objects.for_name(name, transliterate) for name in names if name.strip()]
        self.tags.set(tags)

    def to_summary(self):
        """Fields shown in post listings."""
        author = self.author
        category = self.category
        return {
            "id": self.pk,
            "title": self.title,
            "slug": self.slug,
            "excerpt": self.excerpt,
            "featured_image": self.featured_image or None,
            "status": self.status,
            "views": self.views,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "user_id": author.pk,
            "username": author.get_username(),
            "avatar": Profile.for_user(author).avatar or None,
            "category_id": category.pk if category else None,
            "category_name": category.name if category else None,
            "category_slug": category.slug if category else None,
        }

    def to_dict(self):
        """Full post, including content, SEO fields and tags."""
        data = self.to_summary()
        data.update({
            "content": self.content,
            "meta_description": self.meta_description or None,
            "focus_keyword": self.focus_keyword or None,
            "bio": Profile.for_user(self.author).bio or None,
            "likes": self.like_count,
            "tags": [tag.to_dict() for tag in self.tags.all()],
        })
        return data
