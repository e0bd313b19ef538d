from django.urls import path
from .views.auth_views import GoogleLoginView, GoogleCallbackView, ProfileView, LogoutView

urlpatterns = [
    path("google", GoogleLoginView.as_view(), name="google-login"),
    path("google/callback", GoogleCallbackView.as_view(), name="google-callback"),
    path("profile", ProfileView.as_view(), name="profile"),
    path("logout", LogoutView.as_view(), name="logout"),
]
