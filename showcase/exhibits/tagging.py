import logging

from django.db import IntegrityError
from django.db import transaction

from showcase.exhibits.exceptions import TagConflictError
from showcase.exhibits.models import Tag

logger = logging.getLogger(__name__)

MAX_TAG_ATTEMPTS = 2


def find_or_create_tag(name: str, *, path: str = "$") -> Tag:
    """
    Return the shared tag called ``name``, creating it if needed.

    Tags are global and unique by name, so two imports may race to create the
    same one. Each attempt runs in a savepoint; a unique conflict is retried
    once (the second attempt finds the winner's row) before giving up with
    ``TagConflictError``.
    """
    name = name.strip()
    for attempt in range(1, MAX_TAG_ATTEMPTS + 1):
        try:
            with transaction.atomic():
                tag, _ = Tag.objects.get_or_create(name=name)
        except IntegrityError:
            logger.warning("Tag %r conflicted on attempt %d", name, attempt)
            continue
        return tag
    msg = f"Could not create or find tag {name!r}."
    raise TagConflictError(msg, path=path)
