"""
Forms validating JSON payloads sent to the API views.
"""
from django import forms

from .conf import blog_settings
from .slugs import normalize, smart_slugify


class TagListField(forms.Field):
    """Accepts a JSON list of tag names or a comma separated string."""

    def __init__(self, *, max_length=100, **kwargs):
        self.max_length = max_length
        super().__init__(**kwargs)

    def to_python(self, value):
        if value in self.empty_values:
            return []
        if isinstance(value, str):
            value = value.split(",")
        if not isinstance(value, (list, tuple)):
            raise forms.ValidationError("Tags must be a list of names")
        names = [str(name).strip() for name in value if str(name).strip()]
        for name in names:
            if len(name) > self.max_length:
                raise forms.ValidationError(
                    f"Tag names must be at most {self.max_length} characters"
                )
        return names


class RegisterForm(forms.Form):
    username = forms.CharField(
        max_length=150,
        min_length=3,
        error_messages={"min_length": "Username must be at least 3 characters"},
    )
    email = forms.EmailField(
        error_messages={"invalid": "Please provide a valid email"},
    )
    password = forms.CharField(strip=False)

    def clean_email(self):
        return self.cleaned_data["email"].lower()

    def clean_password(self):
        password = self.cleaned_data["password"]
        minimum = blog_settings.MIN_PASSWORD_LENGTH
        if len(password) < minimum:
            raise forms.ValidationError(f"Password must be at least {minimum} characters")
        return password


class LoginForm(forms.Form):
    email = forms.EmailField(
        error_messages={"invalid": "Please provide a valid email"},
    )
    password = forms.CharField(
        strip=False,
        error_messages={"required": "Password is required"},
    )

    def clean_email(self):
        return self.cleaned_data["email"].lower()


class ProfileForm(forms.Form):
    username = forms.CharField(max_length=150, min_length=3, required=False)
    bio = forms.CharField(required=False)
    avatar = forms.CharField(max_length=500, required=False)


class PasswordChangeForm(forms.Form):
    current_password = forms.CharField(strip=False, required=False)
    new_password = forms.CharField(strip=False, required=False)

    def clean(self):
        cleaned_data = super().clean()
        current = cleaned_data.get("current_password")
        new = cleaned_data.get("new_password")
        if not current or not new:
            raise forms.ValidationError("Please provide both current and new password")
        minimum = blog_settings.MIN_PASSWORD_LENGTH
        if len(new) < minimum:
            raise forms.ValidationError(f"New password must be at least {minimum} characters")
        return cleaned_data


class PostForm(forms.Form):
    title = forms.CharField(
        max_length=255,
        error_messages={
            "required": "Title is required",
            "max_length": "Title must be less than 255 characters",
        },
    )
    content = forms.CharField(error_messages={"required": "Content is required"})
    excerpt = forms.CharField(required=False)
    category_id = forms.IntegerField(required=False)
    status = forms.ChoiceField(choices=blog_settings.POST_STATUSES, required=False)
    featured_image = forms.CharField(max_length=500, required=False)
    meta_description = forms.CharField(
        max_length=160,
        required=False,
        error_messages={"max_length": "Meta description must be less than 160 characters"},
    )
    focus_keyword = forms.CharField(
        max_length=100,
        required=False,
        error_messages={"max_length": "Focus keyword must be less than 100 characters"},
    )
    custom_slug = forms.CharField(max_length=255, required=False)
    transliterate_slug = forms.BooleanField(required=False)
    tags = TagListField(required=False)

    def clean(self):
        cleaned_data = super().clean()
        custom_slug = cleaned_data.get("custom_slug")
        title = cleaned_data.get("title")
        if custom_slug:
            if not normalize(custom_slug):
                self.add_error("custom_slug", "Slug must contain letters or digits")
        elif title and not smart_slugify(title, cleaned_data.get("transliterate_slug")):
            self.add_error("title", "Title must contain letters or digits")
        return cleaned_data


class CommentForm(forms.Form):
    content = forms.CharField(error_messages={"required": "Comment content is required"})
    parent_id = forms.IntegerField(required=False)


class CategoryForm(forms.Form):
    name = forms.CharField(max_length=100, error_messages={"required": "Name is required"})
    description = forms.CharField(required=False)
