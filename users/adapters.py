# users/adapters.py

from django.conf import settings
from allauth.account.adapter import DefaultAccountAdapter
from allauth.account.models import EmailAddress
from allauth.account.utils import setup_user_email
from allauth.socialaccount.adapter import DefaultSocialAccountAdapter


class NoUsernameAccountAdapter(DefaultAccountAdapter):
    def save_user(self, request, user, form, commit=True):
        data = form.cleaned_data
        user.email = data.get('email')
        user.name = (data.get('name') or '').strip()
        user.set_password(data.get("password1"))
        user.is_active = True  # keep as True since we're confirming email immediately

        if commit:
            user.save()

        # Set up and auto-confirm the email
        setup_user_email(request, user, [])
        EmailAddress.objects.update_or_create(
            user=user,
            email=user.email,
            defaults={'primary': True, 'verified': True}
        )

        return user

    def get_login_redirect_url(self, request):
        user = request.user
        path = "/admin/dashboard" if getattr(user, "is_staff", False) else "/"
        return f"{settings.FRONTEND_URL}{path}"


class StorefrontSocialAccountAdapter(DefaultSocialAccountAdapter):
    """Google sign-in: new accounts are always customers, named from the profile."""

    def populate_user(self, request, sociallogin, data):
        user = super().populate_user(request, sociallogin, data)
        full = " ".join(p for p in [data.get("first_name"), data.get("last_name")] if p)
        user.name = (data.get("name") or full or "").strip()
        user.is_staff = False
        user.is_superuser = False
        return user
