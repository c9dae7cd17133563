"""
URL configuration for django-blog-platform.

Include in your project urls.py:

    path('api/', include('blog_platform.urls')),
"""
from django.urls import path

from . import console, views

app_name = "blog_platform"

urlpatterns = [
    # Auth
    path("auth/register/", views.RegisterView.as_view(), name="register"),
    path("auth/login/", views.LoginView.as_view(), name="login"),
    path("auth/profile/", views.ProfileView.as_view(), name="profile"),
    path("auth/change-password/", views.ChangePasswordView.as_view(), name="change_password"),
    path("auth/stats/", views.UserStatsView.as_view(), name="user_stats"),

    # Posts
    path("posts/", views.PostListView.as_view(), name="post_list"),
    path("posts/search/", views.PostSearchView.as_view(), name="post_search"),
    path("posts/<int:pk>/like/", views.PostLikeView.as_view(), name="post_like"),
    path("posts/<str:key>/", views.PostDetailView.as_view(), name="post_detail"),

    # Categories
    path("categories/", views.CategoryListView.as_view(), name="category_list"),
    path("categories/<str:slug>/posts/", views.CategoryPostsView.as_view(), name="category_posts"),

    # Comments
    path(
        "comments/posts/<int:post_id>/comments/",
        views.PostCommentsView.as_view(),
        name="post_comments",
    ),
    path("comments/<int:pk>/", views.CommentDetailView.as_view(), name="comment_detail"),

    # Uploads
    path("upload/featured/", views.UploadView.as_view(rule_name="featured"), name="upload_featured"),
    path("upload/image/", views.UploadView.as_view(rule_name="image"), name="upload_image"),
    path("upload/pdf/", views.UploadView.as_view(rule_name="pdf"), name="upload_pdf"),
    path("upload/editor/", views.UploadView.as_view(rule_name="editor"), name="upload_editor"),
    path("upload/list/<str:upload_type>/", views.UploadListView.as_view(), name="upload_list"),
    path(
        "upload/<str:upload_type>/<str:filename>/",
        views.UploadDeleteView.as_view(),
        name="upload_delete",
    ),

    # Admin console
    path("admin/dashboard/", console.DashboardView.as_view(), name="console_dashboard"),
    path("admin/users/", console.UserListView.as_view(), name="console_users"),
    path("admin/users/<int:pk>/", console.UserDetailView.as_view(), name="console_user_detail"),
    path("admin/users/<int:pk>/role/", console.UserRoleView.as_view(), name="console_user_role"),
    path("admin/posts/", console.ConsolePostListView.as_view(), name="console_posts"),
    path("admin/posts/<int:pk>/", console.ConsolePostDetailView.as_view(), name="console_post_detail"),
    path("admin/posts/<int:pk>/status/", console.PostStatusView.as_view(), name="console_post_status"),
    path("admin/categories/", console.ConsoleCategoryListView.as_view(), name="console_categories"),
    path(
        "admin/categories/<int:pk>/",
        console.ConsoleCategoryDetailView.as_view(),
        name="console_category_detail",
    ),
    path("admin/comments/", console.ConsoleCommentListView.as_view(), name="console_comments"),
    path(
        "admin/comments/<int:pk>/",
        console.ConsoleCommentDetailView.as_view(),
        name="console_comment_detail",
    ),
]
