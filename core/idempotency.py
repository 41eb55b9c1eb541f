from django.db import IntegrityError, transaction
from .models import IdempotencyKey

HEADER = "Idempotency-Key"


class DuplicateRequest(Exception):
    def __init__(self, response_json=None):
        super().__init__("Duplicate request")
        self.response_json = response_json or {}


def key_from(request) -> str | None:
    key = (request.headers.get(HEADER) or "").strip()
    return key[:128] or None


def ensure(user, key: str):
    """
    Claim ``key`` for ``user``. Call inside ``transaction.atomic``: the row is
    locked until the caller commits, so concurrent replays queue behind it.
    """
    try:
        with transaction.atomic():
            obj, created = IdempotencyKey.objects.get_or_create(user=user, key=key)
    except IntegrityError:
        created = False
    obj = IdempotencyKey.objects.select_for_update().get(user=user, key=key)
    if not created and obj.success:
        raise DuplicateRequest(obj.response_json)
    return obj


def finalize(user, key: str, response_json: dict | None = None):
    IdempotencyKey.objects.filter(user=user, key=key).update(success=True, response_json=response_json or {})
