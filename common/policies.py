"""
Role based authorization.

A policy answers allow/deny for (actor, action, resource) from the actor's role
flags and the resource's authorship only. Policies never touch the database and
never mutate anything, so the same inputs always give the same answer.

    decide(user, "destroy", message)     -> Decision.ALLOW / Decision.DENY
    authorize(user, "update", message)   -> raises NotAuthorized on deny
    Scope(user, Message.objects).resolve()
"""
import enum
from typing import Dict, Optional, Type

from .exceptions import NotAuthorized

CREATE = "create"
UPDATE = "update"
DESTROY = "destroy"
ACTIONS = (CREATE, UPDATE, DESTROY)


class Decision(enum.Enum):
    ALLOW = "allow"
    DENY = "deny"

    def __bool__(self) -> bool:
        return self is Decision.ALLOW


def _is_authenticated(user) -> bool:
    return bool(user is not None and getattr(user, "is_authenticated", False))


def is_admin(user) -> bool:
    return _is_authenticated(user) and bool(getattr(user, "is_admin", False))


def is_member(user) -> bool:
    return _is_authenticated(user) and bool(getattr(user, "is_member", False))


class AuthorshipPolicy:
    """
    Default rules for authored resources:
      create          author is the actor, and the actor is a member or an admin
      update/destroy  actor is an admin, or the actor is the author
    """
    author_attr = "author"

    def __init__(self, user, record):
        self.user = user
        self.record = record

    def author(self):
        return getattr(self.record, self.author_attr, None)

    def is_author(self) -> bool:
        author = self.author()
        return _is_authenticated(self.user) and author is not None and author == self.user

    def create(self) -> bool:
        return self.is_author() and (is_member(self.user) or is_admin(self.user))

    def update(self) -> bool:
        return is_admin(self.user) or self.is_author()

    def destroy(self) -> bool:
        return is_admin(self.user) or self.is_author()

    class Scope:
        def __init__(self, user, scope):
            self.user = user
            self.scope = scope

        def resolve(self):
            if is_admin(self.user):
                return self.scope.all()
            return self.restricted()

        def restricted(self):
            # non-admin filtering belongs to the resource's query layer
            visible_to = getattr(self.scope, "visible_to", None)
            if visible_to is None:
                return self.scope.none()
            return visible_to(self.user)


_registry: Dict[type, Type[AuthorshipPolicy]] = {}


def register(model: type):
    """Class decorator binding a policy to a resource class."""
    def wrap(policy_cls: Type[AuthorshipPolicy]) -> Type[AuthorshipPolicy]:
        _registry[model] = policy_cls
        return policy_cls
    return wrap


def policy_for(resource) -> Type[AuthorshipPolicy]:
    cls = resource if isinstance(resource, type) else type(resource)
    for klass in cls.__mro__:
        if klass in _registry:
            return _registry[klass]
    return AuthorshipPolicy


def decide(actor, action: str, resource, policy: Optional[Type[AuthorshipPolicy]] = None) -> Decision:
    if action not in ACTIONS:
        return Decision.DENY
    policy_cls = policy or policy_for(resource)
    allowed = getattr(policy_cls(actor, resource), action)()
    return Decision.ALLOW if allowed else Decision.DENY


def authorize(actor, action: str, resource, policy: Optional[Type[AuthorshipPolicy]] = None) -> None:
    if decide(actor, action, resource, policy=policy) is Decision.DENY:
        raise NotAuthorized(f"Not allowed to {action} this {type(resource).__name__.lower()}.")


def policy_scope(actor, queryset):
    policy_cls = policy_for(queryset.model)
    return policy_cls.Scope(actor, queryset).resolve()
