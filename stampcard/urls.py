from django.urls import path

from .views import (
    AdminActionView,
    AdminLoginView,
    AdminLogoutView,
    AdminResetPasscodeView,
    CardActionView,
    CardView,
    DashboardView,
    HomeView,
    LoginView,
    LogoutView,
    RegisterView,
)

app_name = "stampcard"

urlpatterns = [
    path("", HomeView.as_view(), name="home"),
    path("register/", RegisterView.as_view(), name="register"),
    path("login/", LoginView.as_view(), name="login"),
    path("logout/", LogoutView.as_view(), name="logout"),
    path("card/", CardView.as_view(), name="card"),
    path("card/stamp/", CardActionView.as_view(action="add_stamp"), name="card-stamp"),
    path("card/redeem/", CardActionView.as_view(action="redeem"), name="card-redeem"),
    path("staff/login/", AdminLoginView.as_view(), name="admin-login"),
    path("staff/logout/", AdminLogoutView.as_view(), name="admin-logout"),
    path("staff/dashboard/", DashboardView.as_view(), name="dashboard"),
    path("staff/stamp/", AdminActionView.as_view(action="add_stamp_for"), name="admin-stamp"),
    path("staff/redeem/", AdminActionView.as_view(action="redeem_for"), name="admin-redeem"),
    path(
        "staff/reset-passcode/",
        AdminResetPasscodeView.as_view(),
        name="admin-reset-passcode",
    ),
]
