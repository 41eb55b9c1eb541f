from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models


class UserManager(BaseUserManager):
    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError("Email is required")
        email = self.normalize_email(email)
        user  = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        return self._create_user(email, password, **extra_fields)


class User(AbstractUser):
    """Storefront account. Staff users are the store admins."""

    STATUS = [
        ("active", "Active"),
        ("suspended", "Suspended"),
    ]

    username = None
    email    = models.EmailField(unique=True)
    name     = models.CharField(max_length=120, blank=True)
    phone    = models.CharField(max_length=32, blank=True)
    status   = models.CharField(max_length=16, choices=STATUS, default="active")
    is_vip   = models.BooleanField(default=False)

    USERNAME_FIELD  = 'email'
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        ordering = ("-date_joined",)

    def __str__(self):
        return self.email

    @property
    def role(self) -> str:
        return "admin" if self.is_staff else "customer"

    @property
    def display_name(self) -> str:
        return (self.name or "").strip() or self.email
