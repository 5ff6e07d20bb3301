from rest_framework import permissions

from .policies import DESTROY, UPDATE, decide

_VIEW_ACTIONS = {
    "update": UPDATE,
    "partial_update": UPDATE,
    "destroy": DESTROY,
}


class PolicyPermission(permissions.BasePermission):
    """
    Object-level gate backed by common.policies.
    Only update/destroy go through the resource's policy; reads and extra
    viewset actions are left to the view. Creation is checked in perform_create
    since the record doesn't exist until the serializer builds it.
    """
    message = "You are not allowed to perform this action."

    def has_object_permission(self, request, view, obj):
        action = _VIEW_ACTIONS.get(getattr(view, "action", None))
        if action is None:
            return True
        return bool(decide(request.user, action, obj))
