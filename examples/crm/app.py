"""CRM — a JSON API mounted under ``/custom/api`` and ``/api``.

Login issues an opaque bearer token; every other route needs it. Leads
are kept in memory and handled by a controller class registered as
``(LeadsController, "action")`` pairs. The chat endpoint has its own,
tighter rate limit.

Run:
    waypoint run examples.crm.app:app
"""

import secrets
import threading
from dataclasses import asdict, dataclass, replace

from waypoint import App, AppConfig, AppContext, BadRequest, NotFound, Request
from waypoint.middleware import (
    BearerAuthConfig,
    BearerAuthMiddleware,
    BodyLimitMiddleware,
    RateLimitMiddleware,
    SecurityHeadersMiddleware,
)

USERS = {"jane": "secret"}


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Lead:
    id: str
    first_name: str
    last_name: str
    status: str = "New"


class LeadStore:
    def __init__(self) -> None:
        self._leads: dict[str, Lead] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def all(self) -> list[Lead]:
        return list(self._leads.values())

    def get(self, lead_id: str) -> Lead:
        lead = self._leads.get(lead_id)
        if lead is None:
            raise NotFound("Lead not found")
        return lead

    def add(self, first_name: str, last_name: str) -> Lead:
        with self._lock:
            lead = Lead(id=str(self._next_id), first_name=first_name, last_name=last_name)
            self._next_id += 1
            self._leads[lead.id] = lead
        return lead

    def update(self, lead_id: str, **changes: str) -> Lead:
        lead = replace(self.get(lead_id), **changes)
        self._leads[lead_id] = lead
        return lead

    def remove(self, lead_id: str) -> None:
        self.get(lead_id)
        del self._leads[lead_id]


class TokenStore:
    def __init__(self) -> None:
        self._tokens: dict[str, dict[str, str]] = {}

    def issue(self, user_name: str) -> str:
        token = secrets.token_urlsafe(24)
        self._tokens[token] = {"user_name": user_name}
        return token

    def verify(self, token: str) -> dict[str, str] | None:
        return self._tokens.get(token)


tokens = TokenStore()
context = AppContext(services={"leads": LeadStore(), "tokens": tokens})

app = App(
    AppConfig(mount_prefixes=("/custom/api", "/custom/api/index.php", "/api")),
    context=context,
)

app.use(BodyLimitMiddleware())
app.use(SecurityHeadersMiddleware())
app.use(RateLimitMiddleware())
app.use(BearerAuthMiddleware(BearerAuthConfig(verify_token=tokens.verify)))


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@app.post("/auth/login", skip_auth=True)
def login(request: Request, params):
    user_name = request.get("username")
    if not user_name or USERS.get(user_name) != request.get("password"):
        return {"error": "Invalid credentials"}, 401
    token = request.context.service("tokens").issue(user_name)
    return {"access_token": token, "token_type": "Bearer"}


@app.get("/auth/me")
def me(request: Request, params):
    return request.state["user"]


class LeadsController:
    def list(self, request: Request, params):
        leads = request.context.service("leads").all()
        status = request.query.get("status")
        if status:
            leads = [lead for lead in leads if lead.status == status]
        return {"data": [asdict(lead) for lead in leads], "total": len(leads)}

    def show(self, request: Request, params):
        return request.context.service("leads").get(params["id"])

    def create(self, request: Request, params):
        first, last = request.get("first_name"), request.get("last_name")
        if not last:
            raise BadRequest("last_name is required")
        return request.context.service("leads").add(first or "", last), 201

    def update(self, request: Request, params):
        editable = ("first_name", "last_name", "status")
        changes = {k: v for k, v in request.data.items() if k in editable}
        return request.context.service("leads").update(params["id"], **changes)

    def delete(self, request: Request, params):
        request.context.service("leads").remove(params["id"])
        return {"deleted": params["id"]}


app.get("/leads", (LeadsController, "list"))
app.post("/leads", (LeadsController, "create"))
app.get("/leads/:id", (LeadsController, "show"))
app.put("/leads/:id", (LeadsController, "update"))
app.delete("/leads/:id", (LeadsController, "delete"))


@app.get("/leads/{id}/score-history", positional=True)
def score_history(request: Request, lead_id: str):
    request.context.service("leads").get(lead_id)
    return {"lead_id": lead_id, "history": []}


@app.post("/ai/chat")
async def chat(request: Request, params):
    message = request.get("message")
    if not message:
        raise BadRequest("message is required")
    return {"reply": f"You said: {message}"}
