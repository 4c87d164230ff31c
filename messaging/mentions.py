# pitcrew-backend/messaging/mentions.py
import re
from functools import reduce
from operator import or_

from django.db.models import Q

from users.models import User
from .models import Mention

MENTION_RE = re.compile(r"(?<![\w@])@([\w.+-]+)")

MENTION_CATEGORIES = {key for key, _ in User.EXPERTISE_CHOICES}


def extract_handles(content: str) -> list:
    """Handles after "@", in order, without case-insensitive duplicates."""
    handles = []
    seen = set()
    for handle in MENTION_RE.findall(content or ""):
        handle = handle.rstrip(".")
        if handle and handle.lower() not in seen:
            seen.add(handle.lower())
            handles.append(handle)
    return handles


def record_mentions(message) -> list:
    """
    Create Mention rows for every @handle in the message that names a
    teammate (by username, any case) or an expertise group. Unknown handles
    are ignored. Usernames win over group names.
    """
    handles = extract_handles(message.content)
    if not handles:
        return []

    by_username = reduce(or_, (Q(username__iexact=handle) for handle in handles))
    teammates = {
        u.username.lower(): u
        for u in User.objects.filter(by_username, team_id=message.team_id)
    }

    mentions = []
    for handle in handles:
        user = teammates.get(handle.lower())
        if user is not None:
            mentions.append(Mention(message=message, mentioned_user=user))
        elif handle.lower() in MENTION_CATEGORIES:
            mentions.append(Mention(message=message, mentioned_category=handle.lower()))

    return Mention.objects.bulk_create(mentions)
