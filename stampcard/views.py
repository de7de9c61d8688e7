"""
Stampcard views.

Thin HTTP layer over AuthService, LedgerService and Gates.

Outcome mapping (StampcardView.dispatch):
    - Unauthenticated  -> redirect to the view's login page
    - Forbidden        -> 403 message page
    - StampcardError   -> 400 message page (input can be retried)
    - StoreUnavailable -> 503 message page, logged
"""

from __future__ import annotations

import logging
from urllib.parse import urlencode

from django.shortcuts import redirect, render
from django.urls import reverse
from django.views import View

from stampcard import session
from stampcard.conf import stampcard_settings
from stampcard.exceptions import StampcardError, StoreUnavailable
from stampcard.gates import Forbidden, Gates, Unauthenticated
from stampcard.services.auth import AuthService
from stampcard.services.ledger import LedgerService
from stampcard.utils import normalize_username

logger = logging.getLogger("stampcard.views")


def _message(request, title: str, text: str, back: str, status: int = 400):
    return render(
        request,
        "stampcard/message.html",
        {"title": title, "text": text, "back": back},
        status=status,
    )


def _dashboard_url(username: str = "") -> str:
    url = reverse("stampcard:dashboard")
    if username:
        url += "?" + urlencode({"q": username})
    return url


class StampcardView(View):
    """Base view: resolves the principal and maps outcomes to responses."""

    login_url_name = "stampcard:home"
    back_url_name = "stampcard:home"

    def dispatch(self, request, *args, **kwargs):
        self.principal = session.load(request)
        back = self.get_back_url()
        try:
            return super().dispatch(request, *args, **kwargs)
        except Unauthenticated:
            return redirect(self.login_url_name)
        except Forbidden as exc:
            return _message(request, "Not allowed", exc.message, back, status=403)
        except StampcardError as exc:
            return _message(request, "Error", exc.message, back)
        except StoreUnavailable:
            logger.exception("Account store unavailable")
            return _message(
                request,
                "Unavailable",
                "The loyalty card service is unavailable. Please try again shortly.",
                back,
                status=503,
            )

    def get_back_url(self) -> str:
        return reverse(self.back_url_name)


# =============================================================================
# Customer
# =============================================================================


class HomeView(StampcardView):
    """Login and registration forms."""

    def get(self, request):
        if isinstance(self.principal, session.AdminSession):
            return redirect("stampcard:dashboard")
        if isinstance(self.principal, session.CustomerSession):
            return redirect("stampcard:card")
        return render(request, "stampcard/home.html")


class RegisterView(StampcardView):
    http_method_names = ["post"]

    def post(self, request):
        principal = AuthService().register_customer(
            request.POST.get("username", ""),
            request.POST.get("passcode", ""),
        )
        session.save(request, principal)
        return redirect("stampcard:card")


class LoginView(StampcardView):
    http_method_names = ["post"]

    def post(self, request):
        principal = AuthService().login_customer(
            request.POST.get("username", ""),
            request.POST.get("passcode", ""),
        )
        session.save(request, principal)
        return redirect("stampcard:card")


class LogoutView(StampcardView):
    http_method_names = ["get", "post"]

    def get(self, request):
        AuthService().logout(self.principal)
        session.clear(request)
        return redirect("stampcard:home")

    post = get


class CardView(StampcardView):
    """The customer's own stamp card."""

    def get(self, request):
        ledger = LedgerService()
        try:
            account = ledger.get(Gates.customer_action(self.principal))
        except StampcardError as exc:
            if exc.code != "ACCOUNT_NOT_FOUND":
                raise
            # Session outlived its account.
            logger.warning("Card session for missing account, logging out")
            session.clear(request)
            return redirect("stampcard:home")
        progress = ledger.progress(account)
        return render(
            request,
            "stampcard/card.html",
            {
                "account": account,
                "progress": progress,
                "slots": [i < account.stamps for i in range(progress.target)],
                "pin_enabled": stampcard_settings.ADMIN_AUTH == "pin",
            },
        )


class CardActionView(StampcardView):
    """Staff action on the logged-in customer's card (pin strategy)."""

    http_method_names = ["post"]
    back_url_name = "stampcard:card"
    action = ""

    def post(self, request):
        account_id = Gates.customer_action(self.principal)
        Gates.admin_action(self.principal, pin=request.POST.get("pin"))
        getattr(LedgerService(), self.action)(account_id)
        return redirect("stampcard:card")


# =============================================================================
# Admin
# =============================================================================


class AdminLoginView(StampcardView):
    back_url_name = "stampcard:admin-login"

    def get(self, request):
        if isinstance(self.principal, session.AdminSession):
            return redirect("stampcard:dashboard")
        return render(request, "stampcard/admin_login.html")

    def post(self, request):
        principal = AuthService().login_admin(
            request.POST.get("username", ""),
            request.POST.get("password", ""),
        )
        session.save(request, principal)
        return redirect("stampcard:dashboard")


class AdminLogoutView(LogoutView):
    pass


class DashboardView(StampcardView):
    """Account listing and search."""

    login_url_name = "stampcard:admin-login"
    back_url_name = "stampcard:admin-login"

    def get(self, request):
        Gates.admin_action(self.principal)
        query = request.GET.get("q", "").strip()
        accounts = LedgerService().list_accounts(query)
        return render(
            request,
            "stampcard/dashboard.html",
            {"accounts": accounts, "query": query},
        )


class AdminActionView(StampcardView):
    """By-username ledger action from the dashboard."""

    http_method_names = ["post"]
    login_url_name = "stampcard:admin-login"
    back_url_name = "stampcard:dashboard"
    action = ""

    def post(self, request):
        Gates.admin_action(self.principal, pin=request.POST.get("pin"))
        username = request.POST.get("username", "")
        self.perform(LedgerService(), username)
        if not isinstance(self.principal, session.AdminSession):
            # PIN-authorized from a customer's card page.
            return redirect("stampcard:card")
        return redirect(_dashboard_url(normalize_username(username)))

    def get_back_url(self) -> str:
        if isinstance(self.principal, session.CustomerSession):
            return reverse("stampcard:card")
        return super().get_back_url()

    def perform(self, ledger: LedgerService, username: str):
        return getattr(ledger, self.action)(username)


class AdminResetPasscodeView(AdminActionView):
    def perform(self, ledger: LedgerService, username: str):
        return ledger.reset_credential_for(username, self.request.POST.get("new_passcode", ""))
