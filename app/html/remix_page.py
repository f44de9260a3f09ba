from jinja2 import Environment

from remix.models import Recipe
from remix.session import RemixSession


class RemixPage:
    def __init__(
        self,
        session: RemixSession,
        *,
        environment: Environment,
        template_name: str = "remix-result.html",
    ) -> None:
        self.session = session
        self.env = environment
        self.name = template_name

    @property
    def recipes(self) -> list[tuple[int, Recipe]]:
        """Recipes as returned, numbered from one."""
        return list(enumerate(self.session.recipes, start=1))

    @property
    def summary(self) -> str | None:
        return self.session.summary

    @property
    def transcript(self) -> str:
        return self.session.transcript

    @property
    def share_link(self) -> str | None:
        return self.session.share_link()

    @property
    def error(self) -> str | None:
        return self.session.error

    @property
    def notice(self) -> str | None:
        return self.session.notice

    def render(self) -> str:
        return self.env.get_template(self.name).render(page=self)
