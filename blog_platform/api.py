"""
Base view and mixins for the blog_platform JSON API.
"""
import json
import logging
import math

from django.core import signing
from django.core.exceptions import PermissionDenied
from django.core.paginator import EmptyPage, Paginator
from django.http import Http404, JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from .exceptions import ApiError, Forbidden, FormInvalid, NotAuthenticated, NotFound
from .models import Profile
from .tokens import bearer_token, user_for_token

logger = logging.getLogger(__name__)


def positive_int(value, default):
    """Parse a query parameter as a positive integer, falling back to default."""
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def paginate(request, queryset, key, total_key, default_limit, serialize):
    """
    Paginate queryset by the ``page`` and ``limit`` query parameters.

    Returns the response body: the serialized items under key, plus
    currentPage, totalPages and the item count under total_key. Pages past
    the end are empty.
    """
    page = positive_int(request.GET.get("page"), 1)
    limit = positive_int(request.GET.get("limit"), default_limit)

    paginator = Paginator(queryset, limit)
    try:
        items = list(paginator.page(page).object_list)
    except EmptyPage:
        items = []

    return {
        key: [serialize(item) for item in items],
        "currentPage": page,
        "totalPages": math.ceil(paginator.count / limit),
        total_key: paginator.count,
    }


def get_or_404(queryset, message, **lookup):
    obj = queryset.filter(**lookup).first()
    if obj is None:
        raise NotFound(message)
    return obj


@method_decorator(csrf_exempt, name="dispatch")
class ApiView(View):
    """
    Base view for JSON endpoints.

    Subclasses raise ApiError (or Http404 / PermissionDenied) instead of
    building error responses; dispatch() renders them as JSON.
    """

    def dispatch(self, request, *args, **kwargs):
        try:
            self.authenticate(request)
            return super().dispatch(request, *args, **kwargs)
        except ApiError as exc:
            return JsonResponse(exc.as_payload(), status=exc.status)
        except Http404 as exc:
            return JsonResponse({"message": str(exc) or "Not found"}, status=404)
        except PermissionDenied as exc:
            return JsonResponse({"message": str(exc) or "Forbidden"}, status=403)

    def authenticate(self, request):
        """Hook for mixins that require a token. Public views do nothing."""
        request.api_user = None

    def optional_user(self, request):
        """Return the user of a valid bearer token, or None without failing."""
        token = bearer_token(request)
        if not token:
            return None
        try:
            return user_for_token(token)
        except signing.BadSignature:
            return None

    def payload(self):
        """Decoded JSON body of the request; an empty body is an empty object."""
        if not hasattr(self, "_payload"):
            body = self.request.body
            if not body:
                self._payload = {}
            else:
                try:
                    self._payload = json.loads(body)
                except (UnicodeDecodeError, ValueError):
                    raise ApiError("Invalid JSON body")
                if not isinstance(self._payload, dict):
                    raise ApiError("Invalid JSON body")
        return self._payload

    def validate(self, form_class):
        """Validate the JSON body with form_class and return cleaned data."""
        form = form_class(data=self.payload())
        if not form.is_valid():
            raise FormInvalid(form)
        return form.cleaned_data

    def json(self, data, status=200):
        return JsonResponse(data, status=status, safe=False)


class TokenRequiredMixin:
    """
    Require a valid bearer token.

    Sets request.api_user and request.profile. Methods listed in
    public_methods skip the check.
    """

    public_methods = ()

    def authenticate(self, request):
        super().authenticate(request)
        if request.method.lower() in self.public_methods:
            return

        token = bearer_token(request)
        if not token:
            raise NotAuthenticated("Not authorized, no token")
        try:
            user = user_for_token(token)
        except signing.BadSignature:
            logger.warning("Rejected bearer token for %s %s", request.method, request.path)
            raise NotAuthenticated("Not authorized, token failed")
        if user is None or not user.is_active:
            raise NotAuthenticated("User not found")

        request.api_user = user
        request.profile = Profile.for_user(user)


class ModeratorRequiredMixin(TokenRequiredMixin):
    """Require a moderator or admin."""

    def authenticate(self, request):
        super().authenticate(request)
        if request.api_user is not None and not request.profile.is_moderator:
            raise Forbidden("Access denied. Moderator or admin only.")


class AdminRequiredMixin(TokenRequiredMixin):
    """Require an admin."""

    def authenticate(self, request):
        super().authenticate(request)
        if request.api_user is not None and not request.profile.is_admin:
            raise Forbidden("Access denied. Admin only.")
