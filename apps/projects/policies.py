from common.policies import AuthorshipPolicy, register

from .models import Project


@register(Project)
class ProjectPolicy(AuthorshipPolicy):
    """Projects are authored by their creator; listing is open to everyone signed in."""
    author_attr = "creator"

    class Scope(AuthorshipPolicy.Scope):
        def restricted(self):
            return self.scope.all()
