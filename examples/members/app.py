"""Members — a small club directory built from page controllers.

Every page lives under ``/pages/``: a handler prepares the context and
forwards to its view, or answers directly with a redirect or an error.

Inspect:
    cd examples/members && PYTHONPATH=. perch pages app
"""

from dataclasses import dataclass
from pathlib import Path

from perch import App, AppConfig, MissPolicy

BASE_DIR = Path(__file__).parent

config = AppConfig(
    template_dir=BASE_DIR / "templates",
    static_dir=BASE_DIR / "static",
    uri_prefix="/pages/",
    index_page="home",
    on_miss=MissPolicy.NOT_FOUND,
)
app = App(config=config)


@dataclass(frozen=True, slots=True)
class Member:
    id: int
    name: str
    role: str


MEMBERS = (
    Member(1, "Ada Lovelace", "president"),
    Member(2, "Grace Hopper", "treasurer"),
    Member(3, "Edsger Dijkstra", "member"),
)


def find_member(member_id: int | None) -> Member | None:
    return next((m for m in MEMBERS if m.id == member_id), None)


@app.page("home")
def home(request, response):
    response.context["count"] = len(MEMBERS)
    return response.view


@app.page("members")
class MembersPage:
    """Directory listing, optionally filtered by ``?role=``."""

    def process(self, request, response):
        role = request.query.get("role")
        members = [m for m in MEMBERS if role is None or m.role == role]
        response.context["members"] = members
        response.context["role"] = role
        return response.view


@app.page("member-detail")
class MemberDetailPage:
    def process(self, request, response):
        if "id" not in request.query:
            response.redirect("/pages/members")
            return None
        member = find_member(request.query.get_int("id"))
        if member is None:
            response.error(404, "No such member")
            return None
        response.context["member"] = member
        response.set_header("Cache-Control", "no-store")
        return response.view


@app.page("old-directory")
def old_directory(request, response):
    response.redirect("/pages/members", status=301)


@app.error(404)
def not_found(request):
    return f"Nothing lives at {request.path}"
