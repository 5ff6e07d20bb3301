from common.policies import AuthorshipPolicy, register

from .models import Message


@register(Message)
class MessagePolicy(AuthorshipPolicy):
    """
    create?   the message is authored by the actor, who is a member or an admin
    update?   admin, or the author
    destroy?  admin, or the author
    Listing: admins see all messages, everyone else what Message.objects.visible_to gives them.
    """
    author_attr = "author"
