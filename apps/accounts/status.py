"""
Member/prospect status re-evaluation.

After a user (or one of its identities) is saved, the callable named by
settings.USER_STATUS_POLICY is called with the user. The transition rule itself
is owned by the product side, so the default leaves the flags alone; deployments
point the setting at their own rule.

A policy receives the User and may change role flags; persist with
``apply_status`` so the change does not re-trigger the hook.
"""
import logging
from typing import Callable

from django.conf import settings
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)

StatusPolicy = Callable[["User"], None]  # noqa: F821


def keep_current_status(user) -> None:
    """Default policy: no transition."""
    return None


def get_status_policy() -> StatusPolicy:
    return import_string(settings.USER_STATUS_POLICY)


def apply_status(user, **flags) -> None:
    """Persist role flag changes without firing the user post_save hook again."""
    changed = [name for name, value in flags.items() if getattr(user, name) != value]
    if not changed:
        return
    for name in changed:
        setattr(user, name, flags[name])
    type(user).objects.filter(pk=user.pk).update(**{name: flags[name] for name in changed})
    logger.info("user %s status updated: %s", user.pk, {name: flags[name] for name in changed})


def reevaluate_status(user) -> None:
    if user is None or user.pk is None:
        return
    if getattr(user, "_reevaluating_status", False):
        return  # prevent recursion when the policy saves the user
    try:
        user._reevaluating_status = True
        get_status_policy()(user)
    finally:
        user._reevaluating_status = False
